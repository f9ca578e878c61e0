"""Unit tests for the structured run log."""

import pytest

from datawarehouse.common.exceptions import ErrorCode, load_error
from datawarehouse.constants import StepStatus
from datawarehouse.logging.filters import run_id_var, step_var
from datawarehouse.observability import RunLog


class TestRunLogSteps:

    def test_step_emits_running_then_ok(self):
        run_log = RunLog(run_id="run-1")

        with run_log.step("LOAD_CRM_CUSTOMERS", "Loading customers") as step:
            step.rows_read = 4
            step.rows_written = 3

        running, done = run_log.events
        assert (running.status, done.status) == ("RUNNING", "OK")
        assert running.end_ts is None
        assert done.end_ts >= done.start_ts
        assert done.duration_seconds >= 0
        assert (done.rows_read, done.rows_written) == (4, 3)
        assert {e.run_id for e in run_log.events} == {"run-1"}

    def test_generated_run_id(self):
        assert RunLog().run_id != RunLog().run_id

    def test_exception_marks_failed_and_reraises(self):
        run_log = RunLog()

        with pytest.raises(RuntimeError):
            with run_log.step("LOAD_CRM_SALES"):
                raise RuntimeError("boom")

        event = run_log.events[-1]
        assert event.status == StepStatus.FAILED.value
        assert event.message == "boom"

    def test_dw_error_code_recorded(self):
        run_log = RunLog()

        with pytest.raises(Exception):
            with run_log.step("LOAD_CRM_SALES"):
                raise load_error("silver_crm_sales_details", ValueError("disk full"))

        assert run_log.events[-1].error_code == ErrorCode.LOAD_ERROR.value

    def test_skip_and_fail_without_raising(self):
        run_log = RunLog()

        with run_log.step("LOAD_ERP_LOC_A101") as step:
            step.skip("disabled")
        with run_log.step("TOTAL") as step:
            step.fail("1 failed step", "LAYER_PROCESSING_ERROR")

        statuses = [(e.step, e.status) for e in run_log.events if e.is_terminal]
        assert statuses == [("LOAD_ERP_LOC_A101", "SKIPPED"), ("TOTAL", "FAILED")]
        assert run_log.events[-1].error_code == "LAYER_PROCESSING_ERROR"

    def test_context_set_only_inside_step(self):
        run_log = RunLog(run_id="run-ctx")
        seen = {}

        with run_log.step("LOAD_CRM_PRODUCTS"):
            seen["run_id"] = run_id_var.get()
            seen["step"] = step_var.get()

        assert seen == {"run_id": "run-ctx", "step": "LOAD_CRM_PRODUCTS"}
        assert run_id_var.get() is None
        assert step_var.get() is None

    def test_sink_receives_every_event(self):
        received = []
        run_log = RunLog(sink=received.append)

        with run_log.step("TOTAL"):
            pass

        assert [e.status for e in received] == ["RUNNING", "OK"]


class TestRunLogFrame:

    def test_only_terminal_events_become_rows(self):
        run_log = RunLog(run_id="run-2")
        with run_log.step("LOAD_CRM_CUSTOMERS"):
            pass
        with run_log.step("TOTAL", "done"):
            pass

        frame = run_log.to_frame()

        assert list(frame.columns) == [
            "run_id", "step", "status", "message", "start_ts", "end_ts", "duration_seconds",
        ]
        assert list(frame["step"]) == ["LOAD_CRM_CUSTOMERS", "TOTAL"]
        assert list(frame["status"]) == ["OK", "OK"]
        assert frame.loc[1, "message"] == "done"


class TestStepEventSerialization:

    def test_to_dict_is_json_ready(self):
        run_log = RunLog(run_id="run-3")
        with run_log.step("TOTAL"):
            pass

        data = run_log.events[-1].to_dict()

        assert data["status"] == "OK"
        assert isinstance(data["start_ts"], str)
        assert "rows_read" not in data
        assert run_log.events[-1].to_dict(include_none=True)["rows_read"] is None
