"""Avatar image cache."""

from gamejolt.avatars.cache import AvatarCache, avatar_variant_url
from gamejolt.avatars.interfaces import ImageCache
from gamejolt.avatars.store import AvatarStore

__all__ = ["AvatarCache", "AvatarStore", "ImageCache", "avatar_variant_url"]
