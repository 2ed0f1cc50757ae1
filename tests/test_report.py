"""Tests for the once-only diagnostic sink."""

from __future__ import annotations

import threading

from buildgate.models import MessageName, ReportLevel
from buildgate.report import Report


def test_warning_once_suppresses_same_key() -> None:
    report = Report()

    assert report.report_warning_once(MessageName.SOFT_LINK_BUILD, "first", key="a@1") is True
    assert report.report_warning_once(MessageName.SOFT_LINK_BUILD, "second", key="a@1") is False

    assert [entry.message for entry in report.entries] == ["first"]


def test_dedup_is_scoped_by_kind_and_key() -> None:
    report = Report()

    report.report_warning_once(MessageName.INCOMPATIBLE_OS, "os", key="a@1")
    report.report_warning_once(MessageName.INCOMPATIBLE_CPU, "cpu", key="a@1")
    report.report_warning_once(MessageName.INCOMPATIBLE_OS, "os", key="b@1")

    assert len(report.entries) == 3


def test_key_defaults_to_message_text() -> None:
    report = Report()

    report.report_info_once(MessageName.BUILD_DISABLED, "same")
    report.report_info_once(MessageName.BUILD_DISABLED, "same")
    report.report_info_once(MessageName.BUILD_DISABLED, "different")

    assert [entry.message for entry in report.infos()] == ["same", "different"]
    assert report.warnings() == []
    assert report.has_warnings() is False


def test_concurrent_writers_emit_once() -> None:
    report = Report()
    barrier = threading.Barrier(8)

    def _worker() -> None:
        barrier.wait()
        for _ in range(50):
            report.report_warning_once(MessageName.DISABLED_BUILD_SCRIPTS, "msg", key="pkg@1")

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(report.entries) == 1


def test_entry_to_dict() -> None:
    report = Report()
    report.report_warning_once(MessageName.SOFT_LINK_BUILD, "linked", key="a@1")

    assert report.entries[0].to_dict() == {
        "level": "warning",
        "kind": "SOFT_LINK_BUILD",
        "message": "linked",
    }


def test_report_once_records_given_level() -> None:
    report = Report()

    report.report_once(ReportLevel.INFO, MessageName.BUILD_DISABLED, "off", key="a@1")
    report.report_info_once(MessageName.BUILD_DISABLED, "off again", key="a@1")
    report.report_once(ReportLevel.WARNING, MessageName.BUILD_DISABLED, "off", key="a@1")

    assert [entry.level for entry in report.entries] == [ReportLevel.INFO, ReportLevel.WARNING]
    assert report.infos()[0].message == "off"
