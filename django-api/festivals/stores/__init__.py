from festivals.stores.interfaces import EntityKind, EntityStore

__all__ = ["EntityKind", "EntityStore"]
