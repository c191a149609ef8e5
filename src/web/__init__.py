"""Web application for the AgenticVoice access-control service."""
