"""CLI interface for the supplier evaluation engine."""

import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from supplier_eval.catalog.criteria_catalog import get_criteria_for_type, get_evaluation_title
from supplier_eval.catalog.selection_template import weights_by_group
from supplier_eval.consts import DEFAULT_DATA_DIR
from supplier_eval.evaluators.policy import get_performance_status
from supplier_eval.exceptions import SupplierEvalError
from supplier_eval.models.model_criteria import Category, CategoryType, Provider, ProviderCriticality
from supplier_eval.models.model_selection import SelectionCriterion
from supplier_eval.notifications import default_notifier
from supplier_eval.storage.permanent_storage.file_manager import FileManager
from supplier_eval.workflow.comparison import ComparisonAggregator
from supplier_eval.workflow.evaluations import EvaluationService
from supplier_eval.workflow.selection import SelectionService
from supplier_eval.workflow.weights import WeightConfiguration

app = typer.Typer(
    name="supplier-eval",
    help="Supplier evaluation - Score providers, track commitments, run selection events",
)
selection_app = typer.Typer(help="Competitive selection events")
app.add_typer(selection_app, name="selection")

console = Console()

DATA_DIR_OPTION = typer.Option(DEFAULT_DATA_DIR, "--data-dir", help="Data directory")


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {error}")
    missing = getattr(error, "missing", None)
    if missing:
        console.print(f"  [dim]Missing:[/dim] {', '.join(missing)}")
    raise typer.Exit(1)


def _get_score_color(score: float) -> str:
    """Get color for a 0-5 total score."""
    percentage = get_performance_status(score).percentage
    if percentage >= 85:
        return "green"
    elif percentage >= 70:
        return "yellow"
    else:
        return "red"


def _parse_pairs(pairs: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options."""
    parsed: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            console.print(f"[red]Error:[/red] Invalid {option} '{pair}'. Use key=value")
            raise typer.Exit(1)
        parsed[key.strip()] = value.strip()
    return parsed


def _parse_numbers(pairs: list[str] | None, option: str, cast=float) -> dict:
    parsed = {}
    for key, value in _parse_pairs(pairs, option).items():
        try:
            parsed[key] = cast(value)
        except ValueError:
            console.print(f"[red]Error:[/red] {option} '{key}' must be a number, got '{value}'")
            raise typer.Exit(1)
    return parsed


def _parse_category_type(value: str) -> CategoryType:
    for category_type in CategoryType:
        if value.lower() in (category_type.value.lower(), category_type.name.lower()):
            return category_type
    choices = ", ".join(t.name.lower() for t in CategoryType)
    console.print(f"[red]Error:[/red] Invalid type '{value}'. Must be one of: {choices}")
    raise typer.Exit(1)


def _parse_criticality(value: str) -> ProviderCriticality:
    for criticality in ProviderCriticality:
        if value.lower() in (criticality.value.lower(), criticality.name.lower()):
            return criticality
    choices = ", ".join(c.name.lower() for c in ProviderCriticality)
    console.print(f"[red]Error:[/red] Invalid criticality '{value}'. Must be one of: {choices}")
    raise typer.Exit(1)


# === CATALOG AND PARAMETRIZATION ===


@app.command()
def criteria(
    category_type: str = typer.Argument(..., help="Category type (bienes, servicios)"),
    critical: bool = typer.Option(False, "--critical", help="Show reinforced weights"),
    category_id: str = typer.Option(None, "--category", "-c", help="Apply a category override"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Show the criteria and active weights for a category type."""
    parsed_type = _parse_category_type(category_type)
    override = None
    if category_id:
        category = FileManager(data_dir).load_category(category_id)
        if category is None:
            console.print(f"[red]Error:[/red] Category '{category_id}' not found")
            raise typer.Exit(1)
        override = category.weight_override

    resolved = get_criteria_for_type(parsed_type, is_critical=critical, override=override)

    table = Table(title=get_evaluation_title(parsed_type))
    table.add_column("Criterion", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Weight", justify="right", style="magenta")
    for criterion in resolved:
        table.add_row(criterion.id, criterion.label, f"{criterion.default_weight * 100:.0f}%")
    console.print(table)


@app.command("add-category")
def add_category(
    category_id: str = typer.Argument(..., help="Category ID"),
    name: str = typer.Argument(..., help="Category name"),
    category_type: str = typer.Option("bienes", "--type", "-t", help="bienes or servicios"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Register a purchasing category."""
    category = Category(id=category_id, name=name, category_type=_parse_category_type(category_type))
    FileManager(data_dir).save_category(category)
    console.print(f"[green]Saved category {category.id} ({category.category_type.value})[/green]")


@app.command("add-provider")
def add_provider(
    provider_id: str = typer.Argument(..., help="Provider ID"),
    business_name: str = typer.Argument(..., help="Business name"),
    email: str = typer.Option("", "--email", "-e", help="Contact email"),
    categories: list[str] = typer.Option(None, "--category", "-c", help="Assigned category"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Register a provider and its categories."""
    provider = Provider(
        id=provider_id, business_name=business_name, email=email, category_ids=categories or []
    )
    FileManager(data_dir).save_provider(provider)
    console.print(f"[green]Saved provider {provider.id}[/green]")


@app.command("set-criticality")
def set_criticality(
    provider_id: str = typer.Argument(..., help="Provider ID"),
    criticality: str = typer.Argument(..., help="critico, no_critico or unassigned"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Change which weight set future evaluations of a provider use."""
    service = EvaluationService(FileManager(data_dir))
    try:
        provider = service.set_provider_criticality(provider_id, _parse_criticality(criticality))
    except SupplierEvalError as e:
        _fail(e)
    console.print(f"[green]{provider.id} is now {provider.criticality.value}[/green]")


@app.command("set-weights")
def set_weights(
    category_id: str = typer.Argument(..., help="Category ID"),
    weights: list[str] = typer.Option(None, "--weight", "-w", help="criterion=percent"),
    reset: bool = typer.Option(False, "--reset", help="Go back to catalog weights"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Override the normal weights of a category (percentages summing to 100)."""
    _setup_logging()
    config = WeightConfiguration(FileManager(data_dir))
    try:
        if reset:
            config.reset_weights(category_id)
            console.print(f"[green]Weights for {category_id} reset to catalog defaults[/green]")
            return
        category = config.set_weights(category_id, _parse_numbers(weights, "weight"))
    except SupplierEvalError as e:
        _fail(e)

    table = Table(title=f"Weights for {category.name}")
    table.add_column("Criterion", style="cyan", no_wrap=True)
    table.add_column("Weight", justify="right", style="magenta")
    for criterion_id, weight in category.weight_override.weights.items():
        table.add_row(criterion_id, f"{weight:g}%")
    console.print(table)


# === EVALUATIONS ===


@app.command()
def evaluate(
    provider_id: str = typer.Argument(..., help="Provider ID"),
    category_id: str = typer.Argument(..., help="Category ID"),
    scores: list[str] = typer.Option(None, "--score", "-s", help="criterion=score (1-5)"),
    comments: str = typer.Option("", "--comments", help="Evaluation comments"),
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Evaluate a provider in one of its categories."""
    _setup_logging(verbose)
    service = EvaluationService(FileManager(data_dir), notifier=default_notifier())
    try:
        record = service.create_evaluation(
            provider_id, category_id, _parse_numbers(scores, "score", cast=int), comments=comments
        )
    except SupplierEvalError as e:
        _fail(e)

    status = get_performance_status(record.total_score)
    color = _get_score_color(record.total_score)
    console.print(f"\n[bold]{get_evaluation_title(record.evaluation_type)}[/bold]")
    console.print(f"Evaluation: {record.id}")
    console.print(
        f"Total: [{color}]{record.total_score:.2f} ({record.percentage}%)[/{color}] {status.label}"
    )
    if record.is_action_plan_required:
        console.print("[red]Improvement commitment required[/red]")


@app.command()
def commit(
    evaluation_id: str = typer.Argument(..., help="Evaluation ID"),
    commitments: list[str] = typer.Option(None, "--commitment", "-c", help="criterion=text"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Submit improvement commitments for an evaluation below 70%."""
    _setup_logging()
    service = EvaluationService(FileManager(data_dir), notifier=default_notifier())
    try:
        record = service.submit_commitment(evaluation_id, _parse_pairs(commitments, "commitment"))
    except SupplierEvalError as e:
        _fail(e)
    console.print(
        f"[green]Commitment submitted for {record.id} "
        f"({len(record.improvement_commitments)} criteria)[/green]"
    )


@app.command()
def history(
    provider_id: str = typer.Argument(..., help="Provider ID"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Show a provider's evaluations, newest first."""
    service = EvaluationService(FileManager(data_dir))
    try:
        records = service.list_provider_evaluations(provider_id)
    except SupplierEvalError as e:
        _fail(e)

    if not records:
        console.print("[yellow]No evaluations found.[/yellow]")
        return

    table = Table(title=f"Evaluations of {provider_id}")
    table.add_column("Date", style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Commitment")
    for record in records:
        color = _get_score_color(record.total_score)
        table.add_row(
            record.created_at.strftime("%Y-%m-%d"),
            record.id,
            record.evaluation_type.value,
            f"[{color}]{record.total_score:.2f}[/{color}]",
            record.commitment_state.value,
        )
    console.print(table)


@app.command()
def compare(
    category_id: str = typer.Argument(..., help="Category ID"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Compare the latest evaluations of every provider in a category."""
    aggregator = ComparisonAggregator(FileManager(data_dir))
    try:
        comparisons = aggregator.compare_category(category_id)
    except SupplierEvalError as e:
        _fail(e)

    if not comparisons:
        console.print("[yellow]No providers in this category.[/yellow]")
        return

    table = Table(title=f"Provider comparison: {category_id}")
    table.add_column("Provider", style="cyan")
    table.add_column("Type")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for comparison in comparisons:
        if not comparison.latest:
            table.add_row(comparison.business_name, "-", "-", "[dim]Not evaluated[/dim]")
            continue
        for category_type, summary in comparison.latest.items():
            if summary.needs_failure_notice:
                status = "[red]At risk, no commitment[/red]"
            elif summary.is_at_risk:
                status = "[yellow]At risk, commitment submitted[/yellow]"
            else:
                status = "[green]OK[/green]"
            color = _get_score_color(summary.total_score)
            table.add_row(
                comparison.business_name,
                category_type.value,
                f"[{color}]{summary.total_score:.2f} ({summary.percentage}%)[/{color}]",
                status,
            )
    console.print(table)


# === SELECTION EVENTS ===


@selection_app.command("create")
def selection_create(
    name: str = typer.Argument(..., help="Event name"),
    event_type: str = typer.Option("bienes", "--type", "-t", help="bienes or servicios"),
    criticality: str = typer.Option("unassigned", "--criticality", help="critico or no_critico"),
    template: bool = typer.Option(False, "--template", help="Start from predefined criteria"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Open a selection event."""
    service = SelectionService(FileManager(data_dir))
    try:
        event = service.create_event(
            name,
            _parse_category_type(event_type),
            _parse_criticality(criticality),
            use_template=template,
        )
    except SupplierEvalError as e:
        _fail(e)
    console.print(f"[green]Opened event {event.id}[/green] ({len(event.criteria)} criteria)")


@selection_app.command("criteria")
def selection_criteria(
    event_id: str = typer.Argument(..., help="Event ID"),
    weights: list[str] = typer.Option(None, "--weight", "-w", help="criterion=percent"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Show or change the criteria weights of an event.

    Criteria not yet in the event are added with their ID as label.
    """
    service = SelectionService(FileManager(data_dir))
    try:
        event = service.get_event(event_id)
        if weights:
            changes = _parse_numbers(weights, "weight")
            updated = [
                c.model_copy(update={"weight": changes.pop(c.id)}) if c.id in changes else c
                for c in event.criteria
            ]
            updated += [SelectionCriterion(id=cid, label=cid, weight=w) for cid, w in changes.items()]
            event = service.save_criteria(event_id, updated)
    except SupplierEvalError as e:
        _fail(e)

    table = Table(title=f"Criteria for {event.name}")
    table.add_column("Criterion", style="cyan", no_wrap=True)
    table.add_column("Group", style="blue")
    table.add_column("Weight", justify="right", style="magenta")
    for criterion in event.criteria:
        table.add_row(criterion.id, criterion.group.value, f"{criterion.weight:g}%")
    console.print(table)

    groups = ", ".join(f"{g.value} {w:g}%" for g, w in weights_by_group(event.criteria).items() if w)
    console.print(f"Total: {event.total_weight:g}% ({groups})")


@selection_app.command("add-competitor")
def selection_add_competitor(
    event_id: str = typer.Argument(..., help="Event ID"),
    name: str = typer.Argument(..., help="Competitor name"),
    nit: str = typer.Option("", "--nit", help="Tax identification number"),
    email: str = typer.Option("", "--email", "-e", help="Contact email"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Add a competitor to an open event."""
    service = SelectionService(FileManager(data_dir))
    try:
        competitor = service.add_competitor(event_id, name, nit=nit, email=email)
    except SupplierEvalError as e:
        _fail(e)
    console.print(f"[green]Added competitor {competitor.id}[/green] ({competitor.name})")


@selection_app.command("score")
def selection_score(
    event_id: str = typer.Argument(..., help="Event ID"),
    competitor_id: str = typer.Argument(..., help="Competitor ID"),
    scores: list[str] = typer.Option(None, "--score", "-s", help="criterion=score (1-5)"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Score a competitor."""
    service = SelectionService(FileManager(data_dir))
    try:
        competitor = service.update_competitor_scores(
            event_id, competitor_id, _parse_numbers(scores, "score", cast=int)
        )
    except SupplierEvalError as e:
        _fail(e)
    console.print(f"{competitor.name}: {competitor.total_score:.2f} ({competitor.percentage}%)")


@selection_app.command("results")
def selection_results(
    event_id: str = typer.Argument(..., help="Event ID"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Show competitors ranked by total score."""
    service = SelectionService(FileManager(data_dir))
    try:
        event = service.get_event(event_id)
        rankings = service.results(event_id)
    except SupplierEvalError as e:
        _fail(e)

    if not rankings:
        console.print("[yellow]No competitors yet.[/yellow]")
        return

    table = Table(title=f"Results: {event.name} ({event.status.value})")
    table.add_column("#", justify="right")
    table.add_column("Competitor", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Decision")
    table.add_column("Pending", style="dim")
    for row in rankings:
        color = _get_score_color(row.competitor.total_score)
        name = row.competitor.name
        if row.competitor.id == event.winner_id:
            name = f"[bold]{name} (winner)[/bold]"
        table.add_row(
            str(row.rank),
            name,
            f"[{color}]{row.competitor.total_score:.2f} ({row.competitor.percentage}%)[/{color}]",
            row.decision.label,
            ", ".join(row.missing_criteria),
        )
    console.print(table)


@selection_app.command("confirm")
def selection_confirm(
    event_id: str = typer.Argument(..., help="Event ID"),
    competitor_id: str = typer.Argument(..., help="Winning competitor ID"),
    justification: str = typer.Option(..., "--justification", "-j", help="Reason for the choice"),
    data_dir: Path = DATA_DIR_OPTION,
) -> None:
    """Confirm the winner and close the event."""
    _setup_logging()
    service = SelectionService(FileManager(data_dir), notifier=default_notifier())
    try:
        event = service.confirm_winner(event_id, competitor_id, justification)
    except SupplierEvalError as e:
        _fail(e)
    console.print(f"[bold green]Event {event.id} closed.[/bold green] Winner: {event.winner_id}")
    console.print(f"Registration link: {service.registration_link(event.id)}")


if __name__ == "__main__":
    app()
