import io
import threading

from logger import StatusLogger


def test_entries_are_echoed_with_level():
    stream = io.StringIO()
    logger = StatusLogger(stream=stream)

    logger.log_info("ready")
    logger.log_error("listener failed")

    lines = stream.getvalue().splitlines()
    assert lines[0].endswith("INFO: ready")
    assert lines[1].endswith("ERROR: listener failed")


def test_history_is_trimmed_to_max_entries():
    logger = StatusLogger(max_entries=3, echo=False)

    for i in range(5):
        logger.log_info(f"entry {i}")

    assert [e.message for e in logger.get_all_logs()] == ["entry 2", "entry 3", "entry 4"]
    assert [e.message for e in logger.get_recent_logs(1)] == ["entry 4"]


def test_report_script_and_status():
    logger = StatusLogger(echo=False)

    logger.update_status("Loaded 2 script(s)")
    logger.report_script("Auto click", True)
    logger.report_script("Auto click", False)

    assert logger.get_current_status() == "Loaded 2 script(s)"
    assert [e.message for e in logger.get_recent_logs(2)] == ["Auto click started", "Auto click stopped"]


def test_concurrent_logging_keeps_every_entry():
    logger = StatusLogger(max_entries=1000, echo=False)

    def worker(n):
        for i in range(100):
            logger.log_warning(f"{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(logger.get_all_logs()) == 400
