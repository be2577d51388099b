"""Shared FastAPI dependencies for outbound dispatch.

Routes resolve their dispatcher through these so tests can swap in a
recorder via ``app.dependency_overrides``.
"""

from ripreel.services.bible_maintenance import Dispatcher, enqueue_variant_dispatch
from ripreel.services.video_queue import enqueue_video_dispatch


def get_video_dispatcher() -> Dispatcher:
    return enqueue_video_dispatch


def get_variant_dispatcher() -> Dispatcher:
    return enqueue_variant_dispatch
