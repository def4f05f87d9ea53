"""
Rebuild the blog when a source or template file changes.
"""

import logging
import os
import queue
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .errors import BlgoError, WatchError
from .models import SOURCE_EXT

logger = logging.getLogger('blgo.watch')


class RebuildWorker:
    """
    Runs rebuilds one at a time on a single thread.

    Requests go through a queue holding at most one item: a request made
    while another is already pending is dropped, so a burst of events during
    a rebuild leads to at most one more rebuild.
    """

    def __init__(self, build):
        self.build = build
        self.requests = queue.Queue(maxsize=1)
        self.rebuilds = 0
        self._stopping = threading.Event()
        self._thread = None

    def request(self):
        """Ask for a rebuild. Returns False when one was already pending."""
        try:
            self.requests.put_nowait(True)
        except queue.Full:
            logger.debug("Rebuild already pending")
            return False
        return True

    def run_once(self, timeout=None):
        """Wait for a pending request and run one rebuild. Returns False on timeout."""
        try:
            self.requests.get(timeout=timeout)
        except queue.Empty:
            return False

        self.rebuilds += 1
        try:
            self.build()
        except BlgoError as e:
            logger.error(f"Rebuild failed: {e}")
        except Exception:
            logger.exception("Unexpected error during rebuild")
        return True

    def _run(self):
        while not self._stopping.is_set():
            self.run_once(timeout=0.5)

    def start(self):
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name='blgo-rebuild', daemon=True)
        self._thread.start()

    def stop(self):
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


class WatchHandler(FileSystemEventHandler):
    """Turns filesystem events on tracked files into rebuild requests."""

    def __init__(self, tracked, source_dir, worker):
        super().__init__()
        self.tracked = {os.path.abspath(path) for path in tracked}
        self.source_dir = os.path.abspath(source_dir) if source_dir else None
        self.worker = worker

    def directories(self):
        """Parent directories that must be observed to see every tracked path."""
        dirs = {os.path.dirname(path) for path in self.tracked}
        if self.source_dir:
            dirs.add(self.source_dir)
        return sorted(dirs)

    def is_tracked(self, path):
        if path in self.tracked:
            return True
        # new posts dropped into the source directory are picked up as well
        return (
            self.source_dir is not None
            and os.path.dirname(path) == self.source_dir
            and path.endswith(SOURCE_EXT)
        )

    def _changed(self, action, path):
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        path = os.path.abspath(path)
        if not self.is_tracked(path):
            return
        logger.info(f"{action}: {path}")
        # removed paths stay tracked so that editors saving by remove+create
        # keep triggering rebuilds
        self.tracked.add(path)
        self.worker.request()

    def dispatch(self, event):
        try:
            super().dispatch(event)
        except Exception as e:
            logger.error(WatchError(f"error handling {event.event_type} event: {e}"))

    def on_created(self, event):
        if not event.is_directory:
            self._changed('Created', event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._changed('Modified', event.src_path)

    def on_deleted(self, event):
        if not event.is_directory:
            self._changed('Removed', event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._changed('Moved', event.dest_path)


class Watcher:
    """Watches a Blog's sources and templates and rebuilds it on change."""

    def __init__(self, blog, observer=None):
        self.blog = blog
        self.worker = RebuildWorker(blog.build_all)
        tracked = blog.source_paths() + blog.template_paths() + [blog.settings_path]
        source_dir = blog.source_dir if blog.source_files is None else None
        self.handler = WatchHandler(tracked, source_dir, self.worker)
        self.observer = observer or Observer()

    def start(self):
        for directory in self.handler.directories():
            try:
                self.observer.schedule(self.handler, directory, recursive=False)
                logger.info(f"Watching {directory}")
            except OSError as e:
                logger.error(WatchError(f"could not watch directory: {e}", directory))
        self.worker.start()
        self.observer.start()

    def stop(self):
        self.observer.stop()
        self.observer.join()
        self.worker.stop()
