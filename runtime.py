import asyncio
import logging
import threading

logger = logging.getLogger(__name__)


class LoopRunner:
    """
    Runs a single asyncio event loop on a background thread.

    Request threads hand coroutines to it and block on the result, so all
    session state is read and written from the loop thread only.
    """

    def __init__(self, name="prompt-studio-loop"):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self):
        if not self._thread.is_alive():
            self._thread.start()
            logger.debug("Event loop thread %s started", self._thread.name)
        return self

    def run(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result()

    def call(self, fn, *args, **kwargs):
        async def _call():
            return fn(*args, **kwargs)

        return self.run(_call())

    def stop(self):
        if self._thread.is_alive():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join()
        self.loop.close()
