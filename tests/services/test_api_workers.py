from unittest.mock import MagicMock

from japaneasy.services.analysis import AnalysisResult
from japaneasy.services.api_workers import AnalysisWorker, RemoteMirrorWorker, SyncWorker


def test_mirror_worker_reports_failure_without_raising():
    def failing():
        raise RuntimeError("socket closed")

    worker = RemoteMirrorWorker("upsert words w1", failing)
    errors, finished = [], []
    worker.signals.error.connect(errors.append)
    worker.signals.finished.connect(lambda: finished.append(True))

    worker.run()

    assert errors == ["upsert words w1: socket closed"]
    assert finished == [True]


def test_mirror_worker_success_is_silent():
    action = MagicMock()
    worker = RemoteMirrorWorker("delete grammar g1", action)
    errors = []
    worker.signals.error.connect(errors.append)

    worker.run()

    action.assert_called_once_with()
    assert errors == []


def test_sync_worker_emits_outcome():
    worker = SyncWorker(lambda: "completed")
    outcomes = []
    worker.signals.sync_result.connect(outcomes.append)

    worker.run()

    assert outcomes == ["completed"]


def test_analysis_worker_emits_result():
    service = MagicMock()
    service.analyze.return_value = AnalysisResult(model="m")
    worker = AnalysisWorker(service, b"img", "image/png", "key")
    results = []
    worker.signals.analysis_result.connect(results.append)

    worker.run()

    service.analyze.assert_called_once_with(image_bytes=b"img", mime_type="image/png", api_key="key")
    assert results[0].model == "m"


def test_analysis_worker_converts_unexpected_exception():
    service = MagicMock()
    service.analyze.side_effect = ValueError("boom")
    worker = AnalysisWorker(service, b"img", "image/png", "key")
    errors = []
    worker.signals.error.connect(errors.append)

    worker.run()

    assert errors == ["Unexpected analysis error: boom"]
