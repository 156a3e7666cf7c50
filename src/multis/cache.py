"""Memo of nominal candidate orderings

The nominal half of ranking depends only on the routine's candidate set and
the argument types, so the ordering computed for one type key can be reused
by every later call with the same key.  Entries are tagged with the version
they were built for; stale entries are rebuilt on their next use.
"""

import logging, threading

__all__ = ['DispatchCache']

log = logging.getLogger(__name__)


class DispatchCache(object):

    """Version-tagged, thread-safe memo of candidate orderings

    A reader either sees no entry or a completely built one: orderings are
    built outside the table and published with a single assignment.
    """

    def __init__(self):
        self.__lock = threading.Lock()
        self.entries = {}
        self.hits = self.misses = 0

    def get_or_build(self,key,version,build):
        """Return the ordering for 'key' built at 'version'

        'build' is called with no arguments if there is no current entry;
        its result is frozen into a tuple before being published.
        """
        entry = self.entries.get(key)
        if entry is not None and entry[0]==version:
            self.hits += 1
            return entry[1]

        ordering = tuple(build())
        with self.__lock:
            self.misses += 1
            current = self.entries.get(key)
            if current is not None and current[0]==version:
                return current[1]   # another thread won the race
            self.entries[key] = version, ordering
        log.debug("cached ordering for %r at version %r", key, version)
        return ordering

    def clear(self):
        with self.__lock:
            self.entries = {}

    def __len__(self):
        return len(self.entries)

    def __contains__(self,key):
        return key in self.entries
