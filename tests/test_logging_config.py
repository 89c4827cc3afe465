"""Tests for the operational logger."""

import json
import logging

from varmat_utils.logging_config import OperationalLogger, get_operational_logger


class TestOperationalLogger:
    def test_stage_records(self):
        op_logger = OperationalLogger(name="varmat_test_stages")

        op_logger.log_stage("bug_filter", "START")
        op_logger.log_stage("bug_filter", "COMPLETE", {"removed": 3})

        stages = op_logger.metrics['stages']
        assert [stage['status'] for stage in stages] == ["START", "COMPLETE"]
        assert stages[1]['additional_data'] == {"removed": 3}

    def test_metric_types(self):
        op_logger = OperationalLogger(name="varmat_test_metrics")

        op_logger.log_metric("rows_removed", 5, "counter")
        op_logger.log_metric("memory", 1.5, "gauge", "GB")
        op_logger.log_performance("row_splitter", 2.0, 100)

        assert op_logger.metrics['counters']['rows_removed']['value'] == 5
        assert op_logger.metrics['gauges']['memory']['unit'] == "GB"
        assert op_logger.metrics['timers']['row_splitter_duration']['value'] == 2.0
        assert op_logger.metrics['counters']['row_splitter_rows']['value'] == 100

    def test_metrics_disabled(self):
        op_logger = OperationalLogger(name="varmat_test_disabled", enable_metrics=False)

        op_logger.log_metric("rows_removed", 5, "counter")
        op_logger.log_event("started")

        assert op_logger.get_metrics_summary() == {'metrics_disabled': True}

    def test_file_logging_and_report(self, tmp_path):
        op_logger = OperationalLogger(name="varmat_test_file", output_dir=tmp_path)
        op_logger.log_event("matrices_loaded", {"rows": 8})

        report = op_logger.save_metrics_report(tmp_path / "metrics.json")

        assert op_logger.log_file is not None and op_logger.log_file.exists()
        summary = json.loads(report.read_text())
        assert summary['run_info']['name'] == "varmat_test_file"
        assert summary['metrics']['events'][0]['event'] == "matrices_loaded"

    def test_handlers_not_duplicated(self):
        OperationalLogger(name="varmat_test_handlers")
        op_logger = OperationalLogger(name="varmat_test_handlers")
        assert len(op_logger.logger.handlers) == 1

    def test_attach_routes_module_records(self, tmp_path):
        op_logger = OperationalLogger(name="varmat_test_attach", log_level="DEBUG", output_dir=tmp_path)

        attached = op_logger.attach("varmat_test_attach_stage")
        logging.getLogger("varmat_test_attach_stage.bug_filters").debug("Removing row (warning): pos")

        assert attached.handlers == op_logger.logger.handlers
        assert attached.propagate is False
        assert "Removing row (warning): pos" in op_logger.log_file.read_text()

    def test_attach_replaces_handlers(self):
        first = OperationalLogger(name="varmat_test_reattach_a")
        second = OperationalLogger(name="varmat_test_reattach_b")

        first.attach("varmat_test_reattach_stage")
        attached = second.attach("varmat_test_reattach_stage")

        assert attached.handlers == second.logger.handlers


class TestGetOperationalLogger:
    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VARMAT_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("VARMAT_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("VARMAT_ENABLE_METRICS", "false")

        op_logger = get_operational_logger(name="varmat_test_env")

        assert op_logger.log_level == logging.DEBUG
        assert op_logger.output_dir == tmp_path
        assert op_logger.enable_metrics is False

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("VARMAT_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("VARMAT_LOG_DIR", raising=False)

        op_logger = get_operational_logger(name="varmat_test_level", log_level="WARNING")

        assert op_logger.log_level == logging.WARNING
        assert op_logger.output_dir is None
