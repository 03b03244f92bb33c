"""
Command-line interface for cross-file data consistency validation.

Provides commands for:
- Validating a primary file against reference files
- Listing available validation rules
- Writing a starter engine configuration
"""

import sys
from pathlib import Path

import click
import yaml

from data_consistency import __version__
from data_consistency.core.config import EngineConfig, ValidationOptions
from data_consistency.core.constants import REPORT_FORMATS
from data_consistency.core.engine import ValidationEngine
from data_consistency.core.exceptions import ConfigError, ReporterError
from data_consistency.core.logging_config import get_logger, setup_logging
from data_consistency.core.pretty_output import PrettyOutput as po
from data_consistency.reporters.text_reporter import get_top_issues
from data_consistency.validations.registry import RULE_REGISTRY, get_rule

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Data Consistency - cross-file validation for tabular data.

    Checks a primary CSV/Excel file against reference files for broken
    references, missing values and statistical outliers.
    """
    pass


@cli.command()
@click.argument('primary_file', type=click.Path())
@click.option('--reference', '-r', 'references', multiple=True, type=click.Path(),
              help='Reference (lookup) file; repeat for several files')
@click.option('--rule', 'rules', multiple=True, type=click.Choice(list(RULE_REGISTRY)),
              help='Rule to run; repeat for several rules (default: all)')
@click.option('--key-column', '-k', 'key_columns', multiple=True,
              help='Foreign key column in the primary file; disables relationship auto-detection')
@click.option('--sheet', help='Worksheet name for Excel files')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), help='Engine YAML configuration')
@click.option('--report-format', type=click.Choice(list(REPORT_FORMATS)), help='Report style (overrides config)')
@click.option('--json-output', '-j', help='Path for JSON result output')
@click.option('--fail-on-warning', is_flag=True, help='Fail if warnings are found')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def validate(primary_file, references, rules, key_columns, sheet, config_file, report_format,
             json_output, fail_on_warning, log_level, log_file):
    """
    Validate PRIMARY_FILE against reference files.

    Examples:

    \b
    # Auto-detect relationships between the files
    data-consistency validate sales.csv -r branches.csv -r products.csv

    \b
    # Check one foreign key explicitly
    data-consistency validate sales.csv -r branches.csv -k branch_id

    \b
    # Only completeness, with a JSON result
    data-consistency validate sales.xlsx --sheet Q1 --rule data_completeness -j result.json

    Exit codes: 0 passed, 1 critical issues (or error), 2 warnings with --fail-on-warning.
    """
    setup_logging(level=log_level, log_file=log_file)
    logger.info(f"Starting validation: {primary_file}")

    try:
        config = EngineConfig.from_yaml(config_file) if config_file else EngineConfig()
        if report_format:
            config.report_format = report_format
    except ConfigError as e:
        po.error(f"Configuration error: {e.message}")
        sys.exit(1)

    engine = ValidationEngine(config)
    options = ValidationOptions(
        validation_rules=tuple(rules),
        key_columns=tuple(key_columns),
        sheet=sheet,
    )

    result = engine.validate_data_consistency(primary_file, list(references), options)

    click.echo(result.report or "")

    if result.issues and not result.report:
        # Engine failures carry no rendered report
        for issue in get_top_issues(result.issues, len(result.issues)):
            po.issue(issue.message, severity=issue.severity.value)
            po.item(issue.suggestion, indent=4)

    summary = result.summary
    po.validation_result(
        result.success,
        critical=summary.critical_issues,
        warnings=summary.warning_issues,
        info=summary.info_issues,
        duration_ms=summary.validation_time_ms,
    )

    if json_output:
        try:
            engine.generate_json_report(result, json_output)
            po.output_file("JSON", json_output)
        except ReporterError as e:
            po.error(e.message)
            sys.exit(1)

    if not result.success:
        sys.exit(1)

    if result.has_warnings() and fail_on_warning:
        po.warning("Validation completed with warnings (treating as failure)")
        sys.exit(2)

    sys.exit(0)


@cli.command('list-rules')
def list_rules():
    """List all available validation rules."""
    click.echo(f"\nAvailable Rules: {len(RULE_REGISTRY)}\n")

    for rule_id in RULE_REGISTRY:
        rule = get_rule(rule_id)
        click.echo(f"  {po.DOT} {rule_id} ({rule.severity.value})")
        click.echo(f"    {rule.get_description()}")
        click.echo()


@cli.command('init-config')
@click.argument('output_path', type=click.Path())
def init_config(output_path):
    """
    Write an engine configuration with every default spelled out.

    OUTPUT_PATH: Where to write the YAML file
    """
    output_file = Path(output_path)
    if output_file.exists():
        po.error(f"File already exists: {output_path}")
        sys.exit(1)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        yaml.safe_dump(EngineConfig().to_dict(), f, sort_keys=False)

    po.success(f"Configuration written to {output_path}")
    po.info(f"Use it with: data-consistency validate PRIMARY --config {output_path}", indent=2)


if __name__ == '__main__':
    cli()
