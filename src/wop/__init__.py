"""Who's on Pole? moderation and reputation API."""
