"""
Command-line interface for criterion-stream.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from .capture import StreamCapture
from .config import REPORT_FORMATS, ConfigurationError, load_config, validate_config
from .exceptions import ReportError, RunnerError
from .models import Report
from .reporting import get_reporter
from .results import aggregate_reports
from .runner import TestRunner

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNPARSEABLE = 2


def _echo_event(event: Dict[str, Any]) -> None:
    """Print a render event produced by the runner."""
    if event["type"] == "stdout":
        click.echo(event["output"])
    elif event["type"] == "stderr":
        click.echo(event["output"], err=True)
    else:
        logger.debug("Process exited with code %s", event["code"])


def _capture_file(input_path: Optional[str], test_name: str) -> List[Report]:
    """Capture every report of a saved meson log, or of stdin."""
    capture = StreamCapture()
    if input_path:
        logger.info("Reading test output from %s", input_path)
        with open(input_path, "r", encoding="utf-8", errors="replace") as f:
            return list(capture.iter_reports(f, test_name))
    return list(capture.iter_reports(click.get_text_stream("stdin", errors="replace"), test_name))


def _write_report(reports: List[Report], report_format: str, output: Optional[str], echo: bool) -> None:
    report = get_reporter(report_format).generate(reports)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(click.unstyle(report), encoding="utf-8")
        click.echo(f"Report written to: {output}")
    elif echo:
        click.echo(report)


@click.command()
@click.option(
    "--mode",
    type=click.Choice(["parse", "run"]),
    default="parse",
    help="Parse saved meson output, or run meson test",
)
@click.option(
    "--input",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Saved 'meson test -v' output (parse mode, default: stdin)",
)
@click.option(
    "--test-name",
    default="",
    help="Name of the test the output belongs to (default: read from the output)",
)
@click.option("--test-exe", default="", help="Test executable to run (run mode, default: all)")
@click.option("--suite", help="Criterion test suite to run (run mode)")
@click.option("--test", "test", help="Criterion test to run, requires --suite (run mode)")
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to configuration file (YAML)",
)
@click.option(
    "--report-format",
    type=click.Choice(REPORT_FORMATS),
    help="Report format (overrides config)",
)
@click.option(
    "--output",
    type=click.Path(),
    help="Output file for report (default: stdout)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="WARNING",
    help="Logging level",
)
def main(
    mode: str,
    input_path: Optional[str],
    test_name: str,
    test_exe: str,
    suite: Optional[str],
    test: Optional[str],
    config: Optional[str],
    report_format: Optional[str],
    output: Optional[str],
    log_level: str,
) -> None:
    """
    criterion-stream - Criterion test results from meson test output.

    Examples:

      # Summarize a saved log of all tests in a project
      meson test -C build -v --test-args=--json > test.log
      criterion-stream --input test.log

      # Run one test executable and write JUnit XML
      criterion-stream --mode run --test-exe test_math --report-format junit --output results.xml

      # Run a single test
      criterion-stream --mode run --test-exe test_math --suite math --test add
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    try:
        runner_config = load_config(config)

        if report_format:
            runner_config.report_format = report_format

        errors = validate_config(runner_config)
        if errors:
            click.echo("Configuration errors:", err=True)
            for error in errors:
                click.echo(f"  - {error}", err=True)
            sys.exit(EXIT_FAILED)

        if test and not suite:
            click.echo("Error: --test requires --suite", err=True)
            sys.exit(EXIT_FAILED)

        exit_code = EXIT_OK
        if mode == "run":
            runner = TestRunner(runner_config)
            click.echo(runner.title(test_exe, suite, test))
            result = runner.run(_echo_event, test_exe=test_exe, suite=suite, name=test)
            reports = result.reports
            exit_code = result.exit_code
            # The minimal summary was already streamed while running
            _write_report(reports, runner_config.report_format, output, runner_config.report_format != "minimal")
        else:
            reports = _capture_file(input_path, test_name)
            _write_report(reports, runner_config.report_format, output, True)

        if not reports:
            click.echo("No test report found in the output", err=True)
            sys.exit(EXIT_FAILED)

        summary = aggregate_reports(reports)
        logger.info(
            "Tests complete: %d passed, %d failed, %d skipped",
            summary.passed,
            summary.failed,
            summary.skipped,
        )
        sys.exit(EXIT_OK if summary.success and exit_code == 0 else EXIT_FAILED)

    except ReportError as e:
        logger.error("Unparseable test output: %s", e)
        click.echo(f"Unparseable test output (tooling problem, not a test failure): {e}", err=True)
        sys.exit(EXIT_UNPARSEABLE)
    except RunnerError as e:
        logger.error("Runner error: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    main()
