from clipstack.models.entry import (
    ClipboardEntry,
    FileGroupPayload,
    FilePayload,
    ImagePayload,
    Payload,
    PayloadUnion,
    TextPayload,
    entry_id_of,
    new_entry_id,
)

__all__ = [
    'ClipboardEntry',
    'TextPayload',
    'ImagePayload',
    'FilePayload',
    'FileGroupPayload',
    'Payload',
    'PayloadUnion',
    'entry_id_of',
    'new_entry_id',
]
