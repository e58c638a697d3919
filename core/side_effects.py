"""
Fire-and-forget side effects.

A side effect is follow-up work of a primary operation (notification
fan-out, activity logging) whose outcome the caller never waits for.
Contract:

- it is enqueued only once the surrounding transaction commits;
- it may fail, and a failure is logged here or inside the task;
- it never changes the result of the operation that dispatched it.
"""
import logging

from django.db import transaction

logger = logging.getLogger(__name__)


def _enqueue(task, args, kwargs):
    name = getattr(task, 'name', repr(task))
    try:
        task.delay(*args, **kwargs)
    except Exception:
        logger.exception("Side effect %s could not be dispatched", name)
        return False
    logger.debug("Side effect %s dispatched", name)
    return True


def dispatch(task, *args, **kwargs):
    """Schedule a Celery task to run after the current transaction commits.

    Outside of an atomic block the task is enqueued immediately.
    """
    transaction.on_commit(lambda: _enqueue(task, args, kwargs))
