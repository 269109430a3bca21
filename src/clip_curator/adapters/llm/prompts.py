"""Prompt templates for the content capability."""

ANALYZE_SYSTEM_PROMPT = "You are a helpful assistant that analyzes educational video content."

SEGMENTS_SYSTEM_PROMPT = """You are an editor who finds the most valuable moments in long-form
educational videos so they can be cut into standalone short clips.

A good segment:
1. Teaches one idea completely, without needing the rest of the video
2. Starts at the beginning of a sentence and ends after a conclusion
3. Is between 30 seconds and 3 minutes long"""

SEGMENTS_USER_TEMPLATE = """Find up to 5 key segments in this timestamped transcript.

TRANSCRIPT:
{transcript}

Return JSON:
{{
  "segments": [
    {{
      "startTimeMs": 60000,
      "endTimeMs": 120000,
      "title": "Short title",
      "description": "What the viewer learns",
      "keywords": ["keyword1", "keyword2"]
    }}
  ]
}}

Return ONLY the JSON, no other text."""

EDIT_PLAN_SYSTEM_PROMPT = """You are a short-form video editor. You turn a long educational video
into one vertical short of 30 to 180 seconds by selecting and ordering clips
from the source."""

EDIT_PLAN_USER_TEMPLATE = """Create an edit plan for a short built from this timestamped transcript.

Rules:
- Select 2 to 5 clips, each 15 to 60 seconds long
- Clips must use timestamps that exist in the transcript
- orderIndex is the playback order of the clip in the short (0-based)
- Prefer a hook first, then explanation, then a conclusion

TRANSCRIPT:
{transcript}

Return JSON:
{{
  "clips": [
    {{
      "orderIndex": 0,
      "startTimeMs": 30000,
      "endTimeMs": 60000,
      "title": "Hook",
      "description": "Why this clip is included",
      "keywords": ["keyword"]
    }}
  ],
  "totalDurationMs": 60000,
  "editingStrategy": "highlight_compilation",
  "transitionStyle": "hard_cut"
}}

Return ONLY the JSON, no other text."""

METADATA_SYSTEM_PROMPT = """You write titles, descriptions and tags for short educational videos
on a learning app. Titles are catchy but honest. Descriptions explain what the
viewer will learn in two or three sentences."""

METADATA_USER_TEMPLATE = """Write metadata in {language_name} ({native_name}) for this content.

CONTENT:
{content}

Allowed categories: {categories}
Allowed difficulties: BEGINNER, INTERMEDIATE, ADVANCED

Rules:
- title: at most 60 characters, written in {language_name}
- description: 2-3 sentences in {language_name}
- tags: 3 to 10 short tags without '#'

Return JSON:
{{
  "title": "...",
  "description": "...",
  "tags": ["tag1", "tag2"],
  "category": "PROGRAMMING",
  "difficulty": "BEGINNER"
}}

Return ONLY the JSON, no other text."""

SEARCH_QUERIES_SYSTEM_PROMPT = """You are a content curator for an educational short-video app. You write
YouTube search queries that find Creative Commons licensed lectures, tutorials
and talks worth cutting into shorts."""

SEARCH_QUERIES_USER_TEMPLATE = """Generate search queries for the next crawl.

APP CATEGORIES: {categories}
POPULAR KEYWORDS: {keywords}
TOP PERFORMING TAGS: {top_tags}
SEASONAL CONTEXT: {seasonal}
UNDERREPRESENTED CATEGORIES (prioritize these): {underrepresented}
RECENTLY PUBLISHED (avoid duplicates): {recent}
TARGET LANGUAGES: {languages}

Rules:
- Write each query in its target language
- At least 3 queries per target language, 15 to 30 queries in total
- Split roughly 50:50 between hard skills (programming, science, math, language)
  and soft skills (productivity, psychology, marketing, startup)
- priority is 1 (low) to 10 (high)

Return JSON:
{{
  "queries": [
    {{
      "query": "python tutorial for beginners",
      "targetCategory": "PROGRAMMING",
      "expectedContentType": "tutorial",
      "priority": 8,
      "language": "en"
    }}
  ]
}}

Return ONLY the JSON, no other text."""

EVALUATION_SYSTEM_PROMPT = """You triage YouTube search results before anything is downloaded.
You only see metadata, so judge from the title, description, channel and
popularity signals."""

EVALUATION_USER_TEMPLATE = """Evaluate each video for an educational short-video app.

VIDEOS:
{videos}

For each video give 0-100 scores:
- relevanceScore: fits an educational app
- educationalValue: how much a viewer learns
- shortFormSuitability: how well it cuts into 30-180 second shorts
- predictedQuality: expected quality of the final short

recommendation is one of HIGHLY_RECOMMENDED, RECOMMENDED, MAYBE, SKIP.
Use the index shown next to each video.

Return JSON:
{{
  "evaluations": [
    {{
      "index": 0,
      "relevanceScore": 80,
      "educationalValue": 75,
      "shortFormSuitability": 70,
      "predictedQuality": 78,
      "recommendation": "RECOMMENDED",
      "reasoning": "One sentence"
    }}
  ]
}}

Return ONLY the JSON, no other text."""

CANDIDATE_LINE_TEMPLATE = (
    "[{index}] title: {title} | channel: {channel} | views: {views} | "
    "duration: {duration} | description: {description}"
)
