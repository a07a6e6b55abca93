"""Version bump and release orchestration for multi-package source trees."""
