#!/usr/bin/env python3
"""
Logging Configuration for the Variant Matrix Cleaning Workflow

This module provides logging configuration for interactive sessions and short
analysis scripts that clean variant matrices.

Features:
- Configurable log levels through VARMAT_LOG_LEVEL
- Console logging plus an optional detailed log file
- Stage, metric and event records for each cleaning stage
- JSON metrics report for auditing a run
"""

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, Optional, Union


class OperationalLogger:
    """
    Operational logger for the cleaning workflow.

    Wraps a named logging.Logger and keeps structured records of the stages,
    metrics and events of a run so that they can be saved as a JSON report.
    """

    def __init__(self,
                 name: str = "varmat_clean",
                 log_level: str = "INFO",
                 output_dir: Optional[Path] = None,
                 enable_metrics: bool = True):
        """
        Initialize operational logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            output_dir: Directory for the detailed log file, console only when None
            enable_metrics: Enable metrics collection
        """
        self.name = name
        self.log_level = getattr(logging, str(log_level).upper(), logging.INFO)
        self.output_dir = Path(output_dir) if output_dir else None
        self.enable_metrics = enable_metrics

        self.logger = logging.getLogger(name)
        self.metrics = {}
        self.start_time = time.time()
        self.log_file: Optional[Path] = None

        self._setup_logging()

        if self.enable_metrics:
            self._initialize_metrics()

    def _setup_logging(self) -> None:
        """Set up console and file handlers."""
        self.logger.handlers.clear()
        self.logger.setLevel(self.log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        self.logger.addHandler(console_handler)

        if self.output_dir:
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)

                self.log_file = self.output_dir / f"{self.name}_{int(time.time())}.log"
                file_handler = logging.FileHandler(self.log_file)
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s - %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S'
                ))
                self.logger.addHandler(file_handler)

                self.logger.info(f"Detailed logging to: {self.log_file}")

            except OSError as e:
                self.logger.warning(f"Could not set up file logging: {e}")

    def attach(self, logger_name: str) -> logging.Logger:
        """
        Route the records of another logger through this logger's handlers.

        Used to surface the module loggers of the cleaning stages (e.g.
        'varmat_utils') on the console and in the detailed log file.

        Args:
            logger_name: Name of the logger to attach

        Returns:
            The attached logger
        """
        target = logging.getLogger(logger_name)
        target.handlers.clear()
        target.setLevel(self.log_level)
        for handler in self.logger.handlers:
            target.addHandler(handler)
        target.propagate = False
        return target

    def _initialize_metrics(self) -> None:
        """Initialize metrics collection system."""
        self.metrics = {
            'run_start_time': self.start_time,
            'run_start_date': time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(self.start_time)),
            'log_level': logging.getLevelName(self.log_level),
            'counters': {},
            'timers': {},
            'gauges': {},
            'stages': [],
            'events': []
        }

        self.logger.debug("Metrics collection initialized")

    def log_metric(self, metric_name: str, value: Union[int, float],
                   metric_type: str = "gauge", unit: str = "") -> None:
        """
        Log a metric.

        Args:
            metric_name: Name of the metric
            value: Metric value
            metric_type: Type of metric (counter, gauge, timer)
            unit: Unit of measurement
        """
        if not self.enable_metrics:
            return

        metric_data = {
            'value': value,
            'unit': unit,
            'timestamp': time.time(),
            'type': metric_type
        }

        if metric_type == "counter":
            self.metrics['counters'][metric_name] = metric_data
        elif metric_type == "timer":
            self.metrics['timers'][metric_name] = metric_data
        else:
            self.metrics['gauges'][metric_name] = metric_data

        self.logger.info(f"METRIC: {metric_name}={value}{unit} [{metric_type}]")

    def log_event(self, event_name: str, event_data: Dict = None, level: str = "INFO") -> None:
        """
        Log an operational event.

        Args:
            event_name: Name of the event
            event_data: Additional event data
            level: Log level for the event
        """
        event_record = {
            'event': event_name,
            'timestamp': time.time(),
            'data': event_data or {},
            'level': level
        }

        if self.enable_metrics:
            self.metrics['events'].append(event_record)

        log_method = getattr(self.logger, level.lower(), self.logger.info)
        log_method(f"EVENT: {event_name} - {event_data or {}}")

    def log_performance(self, operation: str, duration: float, items_processed: int = 0) -> None:
        """Log duration and throughput of an operation."""
        rate = items_processed / duration if duration > 0 and items_processed > 0 else 0

        self.logger.info(f"PERFORMANCE: {operation} - duration: {duration:.2f}s, "
                         f"rows: {items_processed}, rate: {rate:.0f}/s")

        self.log_metric(f"{operation}_duration", duration, "timer", "s")
        if items_processed > 0:
            self.log_metric(f"{operation}_rows", items_processed, "counter")

    def log_stage(self, stage_name: str, status: str = "START",
                  additional_data: Dict = None) -> None:
        """
        Log a cleaning stage.

        Args:
            stage_name: Name of the cleaning stage
            status: Stage status (START, COMPLETE, FAILED)
            additional_data: Additional stage data, e.g. row counts
        """
        elapsed = time.time() - self.start_time

        if self.enable_metrics:
            self.metrics['stages'].append({
                'stage': stage_name,
                'status': status,
                'elapsed_time': elapsed,
                'additional_data': additional_data or {}
            })

        level = logging.ERROR if status == "FAILED" else logging.INFO
        self.logger.log(level, f"STAGE: {stage_name} - {status} (elapsed: {elapsed:.2f}s)"
                        + (f" {additional_data}" if additional_data else ""))

    def get_metrics_summary(self) -> Dict:
        """Get metrics summary for reporting."""
        if not self.enable_metrics:
            return {'metrics_disabled': True}

        total_elapsed = time.time() - self.start_time

        return {
            'run_info': {
                'name': self.name,
                'start_time': self.start_time,
                'total_elapsed_seconds': total_elapsed,
                'log_level': logging.getLevelName(self.log_level)
            },
            'metrics': self.metrics,
            'summary_generated_at': time.time()
        }

    def save_metrics_report(self, output_file: Optional[Path] = None) -> Path:
        """
        Save metrics report to JSON file.

        Args:
            output_file: Output file path (optional)

        Returns:
            Path to saved metrics file
        """
        if not output_file:
            output_file = (self.output_dir or Path.cwd()) / f"{self.name}_metrics_{int(time.time())}.json"
        output_file = Path(output_file)

        try:
            with open(output_file, 'w') as f:
                json.dump(self.get_metrics_summary(), f, indent=2, default=str)

            self.logger.info(f"Metrics report saved to: {output_file}")
            return output_file

        except OSError as e:
            self.logger.error(f"Failed to save metrics report: {e}")
            raise


def get_operational_logger(name: str = "varmat_clean",
                           log_level: Optional[str] = None,
                           output_dir: Optional[Path] = None) -> OperationalLogger:
    """
    Get configured operational logger instance.

    Args:
        name: Logger name
        log_level: Log level (from VARMAT_LOG_LEVEL or default to INFO)
        output_dir: Output directory for log files (from VARMAT_LOG_DIR when omitted)

    Returns:
        Configured OperationalLogger instance
    """
    if not log_level:
        log_level = os.environ.get('VARMAT_LOG_LEVEL', 'INFO')

    if not output_dir:
        output_dir_str = os.environ.get('VARMAT_LOG_DIR')
        if output_dir_str:
            output_dir = Path(output_dir_str)

    enable_metrics = os.environ.get('VARMAT_ENABLE_METRICS', 'true').lower() == 'true'

    return OperationalLogger(
        name=name,
        log_level=log_level,
        output_dir=output_dir,
        enable_metrics=enable_metrics
    )
