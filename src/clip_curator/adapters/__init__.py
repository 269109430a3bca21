"""Provider adapters: language model, speech-to-text, storage, media, video source."""
