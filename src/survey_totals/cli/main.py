"""Main CLI entry point for survey totals"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import pandas as pd

from ..data import SurveyDataLoader, SyntheticSurveyGenerator
from ..diagnostics import frequency_table
from ..exceptions import TotalsError
from ..models.categorical import CategoricalColumn
from ..pipeline import get_totals
from ..utils.config import TotalsConfig, TotalsMode, load_config
from ..weighting.composer import TotalsResult


logger = logging.getLogger('survey-totals')


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='Configuration file path (YAML)')
@click.option('--debug/--no-debug', default=False, help='Enable debug mode')
@click.pass_context
def cli(ctx, config: Optional[str], debug: bool):
    """Weighted survey totals and crosstabs"""
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        ctx.obj['config'] = load_config(config) if config else {}
    except TotalsError as e:
        raise click.ClickException(str(e))
    ctx.obj['debug'] = debug


def _loader(ctx, levels_file: Optional[str]) -> SurveyDataLoader:
    levels = dict(ctx.obj['config'].get('levels') or {})
    if levels_file:
        levels.update(SurveyDataLoader.from_yaml(levels_file).levels)
    return SurveyDataLoader(levels)


@cli.command()
@click.argument('input', type=click.Path(exists=True))
@click.argument('var')
@click.option('--weight', '-w', 'weights', multiple=True, help='Weight column (repeatable)')
@click.option('--by', '-b', help='Grouping column')
@click.option('--mode', '-m', type=click.Choice([m.value for m in TotalsMode]), help='Percent or count')
@click.option('--digits', '-d', type=int, help='Decimal digits for percentages')
@click.option('--unweighted/--no-unweighted', default=None, help='Add an unweighted estimate')
@click.option('--by-total/--no-by-total', default=None, help='Add an overall column when grouping')
@click.option('--missing-in-base/--missing-outside-base', default=None,
              help='Count Missing in the percentage base')
@click.option('--levels', '-l', 'levels_file', type=click.Path(exists=True),
              help='YAML file with column level orders')
@click.option('--title', '-t', help='Title for the output')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'csv', 'json']),
              default='text', help='Output format')
@click.option('--output', '-o', type=click.Path(), help='Output file (default: stdout)')
@click.pass_context
def totals(ctx, input: str, var: str, weights: Tuple[str, ...], by: Optional[str],
           mode: Optional[str], digits: Optional[int], unweighted: Optional[bool],
           by_total: Optional[bool], missing_in_base: Optional[bool], levels_file: Optional[str],
           title: Optional[str], output_format: str, output: Optional[str]):
    """Compute weighted totals of VAR from INPUT"""
    overrides = {
        'mode': mode,
        'digits': digits,
        'include_unweighted': unweighted,
        'by_total': by_total,
        'missing_in_base': missing_in_base
    }

    try:
        options = dict(ctx.obj['config'].get('totals') or {})
        options.update({k: v for k, v in overrides.items() if v is not None})
        config = TotalsConfig.from_dict(options)

        loader = _loader(ctx, levels_file)
        data = loader.load(input)
        result = get_totals(data, var, weights=list(weights) or None, by=by,
                            config=config, levels=loader.levels, title=title)
    except TotalsError as e:
        raise click.ClickException(str(e))

    text = _format_result(result, output_format)
    if output:
        Path(output).write_text(text)
        logger.info(f"Totals saved to {output}")
    else:
        click.echo(text)


@cli.command()
@click.argument('input', type=click.Path(exists=True))
@click.argument('var')
@click.option('--levels', '-l', 'levels_file', type=click.Path(exists=True),
              help='YAML file with column level orders')
@click.pass_context
def freq(ctx, input: str, var: str, levels_file: Optional[str]):
    """Unweighted frequencies of VAR, Missing included"""
    try:
        loader = _loader(ctx, levels_file)
        data = loader.load(input)
        if var not in data.columns:
            raise click.ClickException(f"Column '{var}' not found in {input}")
        options = ctx.obj['config'].get('totals') or {}
        column = CategoricalColumn.from_series(
            data[var],
            levels=loader.levels_for(var),
            missing_labels=options.get('missing_labels', ())
        )
    except TotalsError as e:
        raise click.ClickException(str(e))

    click.echo(frequency_table(column).to_string())


@cli.command()
@click.option('--output', '-o', type=click.Path(), required=True, help='Output directory')
@click.option('--rows', '-n', default=1000, type=int, help='Number of respondents')
@click.option('--seed', default=42, type=int, help='Random seed')
def generate(output: str, rows: int, seed: int):
    """Generate a synthetic survey with level metadata"""
    logger.info(f"Generating {rows} synthetic respondents")
    paths = SyntheticSurveyGenerator(seed=seed).save(output, rows=rows)
    for kind, path in paths.items():
        click.echo(f"{kind}: {path}")


def _format_result(result: TotalsResult, output_format: str) -> str:
    """Render a TotalsResult as text, CSV or JSON"""
    if output_format == 'json':
        payload: Dict[str, Any] = {
            'title': result.title,
            'variable': result.variable,
            'group': result.group,
            'tables': {
                str(name): [
                    {str(k): v for k, v in record.items()}
                    for record in result.to_records(name)
                ]
                for name in result.names
            }
        }
        return json.dumps(payload, indent=2, default=str)

    if output_format == 'csv':
        if len(result) == 1:
            return result.table.to_csv()
        combined = pd.concat(result.tables, names=['table'])
        return combined.to_csv()

    lines = []
    if result.title:
        lines.extend([result.title, "=" * len(result.title)])
    for name, table in result.tables.items():
        if result.group is not None:
            lines.extend(["", f"{name}:"])
        lines.append(table.to_string())
    return "\n".join(lines)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
