import contextvars
import logging
import threading

from carbon_intensity.core.logger import _RunIdFilter, current_run_id, get_logger, push_run_id, reset_run_id


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.addFilter(_RunIdFilter())
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


def test_run_id_is_scoped_and_reset():
    assert current_run_id() == "-"

    token = push_run_id("run-7")
    assert current_run_id() == "run-7"
    reset_run_id(token)

    assert current_run_id() == "-"


def test_copied_context_carries_run_id_into_worker_thread():
    handler = _ListHandler()
    log = get_logger("carbon_intensity.tests.worker")
    log.addHandler(handler)
    log.setLevel(logging.INFO)

    token = push_run_id("run-8")
    try:
        ctx = contextvars.copy_context()
        thread = threading.Thread(target=ctx.run, args=(log.info, "from worker"))
        thread.start()
        thread.join()
    finally:
        reset_run_id(token)
        log.removeHandler(handler)

    assert [r.run_id for r in handler.records] == ["run-8"]
