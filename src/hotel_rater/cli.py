"""CLI for the hotel insurance rater."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
from rich.console import Console
from rich.table import Table

from .config import get_brand_catalog, get_lookup_settings, get_rating_profile, load_config
from .exceptions import HotelRaterError, LookupRateLimitError
from .lookup import ClaudePropertyLookup
from .models import Property, RatingResult
from .rating.engine import RatingEngine
from .storage import Storage, export_csv, export_json

app = typer.Typer(
    name="hotel-rater",
    help="Hotel commercial P&C premium estimator",
)
console = Console()


def _get_output_dir() -> Path:
    """Default output directory."""
    return Path("output")


def _get_storage() -> Storage:
    """Default storage instance."""
    return Storage(_get_output_dir() / "hotel_rater.duckdb")


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _parse_value(raw: str) -> Any:
    """JSON literal if it parses (numbers, true/false, null), else the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _apply_overrides(record: dict[str, Any], assignments: list[str]) -> dict[str, Any]:
    """Apply ``key=value`` pairs; ``amenities.pool=true`` sets a nested key."""
    out = dict(record)
    for item in assignments:
        if "=" not in item:
            _fail(f"Expected key=value, got: {item}")
        key, raw = item.split("=", 1)
        key = key.strip()
        if "." in key:
            parent, child = key.split(".", 1)
            nested = dict(out.get(parent) or {})
            nested[child] = _parse_value(raw)
            out[parent] = nested
        else:
            out[key] = _parse_value(raw)
    return out


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _display_property(record: dict[str, Any]) -> None:
    table = Table(title=record.get("property_name") or "Property")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in record.items():
        if key in ("amenities", "photo_analysis"):
            continue
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        table.add_row(key, str(value))
    amenities = record.get("amenities") or {}
    if amenities:
        table.add_row("amenities", ", ".join(k for k, v in amenities.items() if v) or "none")
    photo = record.get("photo_analysis")
    if photo:
        for key, value in photo.items():
            if value is not None:
                table.add_row(f"photo.{key}", str(value))
    console.print(table)


def _display_rating(result: RatingResult) -> None:
    """Display the premium breakdown, warnings and grade."""
    summary = Table(title=f"Premium Estimate ({result.profile} v{result.config_version})")
    summary.add_column("Line", style="cyan")
    summary.add_column("Premium", justify="right")
    summary.add_column("Detail", style="dim")

    summary.add_row("Building", _money(result.building_premium), f"TIV {_money(result.building_value)}")
    summary.add_row("Contents", _money(result.contents_premium), f"TIV {_money(result.contents_value)}")
    summary.add_row(
        "Business income",
        _money(result.business_income_premium),
        f"TIV {_money(result.business_income_value)}",
    )
    if result.equipment_breakdown_premium:
        summary.add_row("Equipment breakdown", _money(result.equipment_breakdown_premium), "")
    summary.add_row(
        "[bold]Property[/bold]",
        f"[bold]{_money(result.property_premium)}[/bold]",
        f"modifier {result.combined_modifier:.3f}",
    )
    gl_detail = []
    if result.gl_restaurant_component:
        gl_detail.append(f"restaurant {_money(result.gl_restaurant_component)}")
    if result.gl_liquor_component:
        gl_detail.append(f"liquor {_money(result.gl_liquor_component)}")
    if result.gl_resort_activities_component:
        gl_detail.append(f"activities {_money(result.gl_resort_activities_component)}")
    summary.add_row("General liability", _money(result.general_liability_premium), ", ".join(gl_detail))
    summary.add_row(
        "Umbrella",
        _money(result.umbrella_excess_premium),
        result.umbrella_limit or "",
    )
    if result.flood_premium:
        summary.add_row("Flood", _money(result.flood_premium), f"zone {result.flood_zone}")
    summary.add_row(
        "[bold]Total[/bold]",
        f"[bold]{_money(result.total_estimated_premium)}[/bold]",
        f"{_money(result.premium_per_room)}/room",
    )
    console.print(summary)
    console.print(f"Risk grade: [bold]{result.risk_grade}[/bold]")

    for w in result.warnings:
        console.print(f"[yellow]Warning: {w}[/yellow]")
    if result.market_note:
        console.print(f"\n[dim]{result.market_note}[/dim]")


def _rate_and_report(
    engine: RatingEngine,
    record: dict[str, Any],
    save: bool,
    json_out: Optional[Path],
    csv_out: Optional[Path],
) -> RatingResult:
    prop = Property.from_dict(record)
    result = engine.rate(prop)
    _display_rating(result)
    if save:
        storage = _get_storage()
        quote_id = storage.save_quote(prop, result)
        storage.close()
        console.print(f"[green]Saved quote {quote_id}[/green]")
    if json_out:
        export_json([result], json_out)
        console.print(f"  JSON: {json_out}")
    if csv_out:
        export_csv([result], csv_out)
        console.print(f"  CSV:  {csv_out}")
    return result


@app.command()
def rate(
    input_path: Optional[Path] = typer.Option(None, "--input", "-i", help="JSON file with property fields"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Field override, key=value"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to rating config YAML"),
    save: bool = typer.Option(False, "--save", help="Store the quote in the local database"),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write full result JSON"),
    csv_out: Optional[Path] = typer.Option(None, "--csv-out", help="Write summary CSV"),
) -> None:
    """Rate a property from a JSON file and/or field overrides."""
    record: dict[str, Any] = {}
    if input_path:
        if not input_path.exists():
            _fail(f"Input not found: {input_path}")
        try:
            with open(input_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            _fail(f"Invalid JSON in {input_path}: {e}")
        # Accept a lookup response ({"property": {...}}) as well as a bare record.
        record = data.get("property", data) if isinstance(data, dict) else {}
    record = _apply_overrides(record, assignments or [])

    try:
        engine = RatingEngine(config=load_config(config_path))
    except (HotelRaterError, FileNotFoundError) as e:
        _fail(str(e))
    _rate_and_report(engine, record, save, json_out, csv_out)


@app.command()
def lookup(
    query: str = typer.Argument(..., help="Hotel name and/or address"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to rating config YAML"),
    then_rate: bool = typer.Option(False, "--rate", help="Rate the looked-up property"),
    save: bool = typer.Option(False, "--save", help="Store the quote (with --rate)"),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the looked-up property JSON"),
) -> None:
    """Look up a hotel with web search and photo analysis."""
    try:
        cfg = load_config(config_path)
        profile = get_rating_profile(cfg)
        source = ClaudePropertyLookup(settings=get_lookup_settings(cfg), brand_catalog=profile.brands)
        console.print(f"[bold]Looking up {query!r}...[/bold]")
        result = source.lookup(query)
    except LookupRateLimitError as e:
        _fail(f"{e} {e.retry_guidance}")
    except (HotelRaterError, FileNotFoundError) as e:
        _fail(str(e))

    for err in result.errors:
        console.print(f"[yellow]Warning: {err}[/yellow]")
    console.print(
        f"[dim]Images: {result.images_analyzed} analyzed of {result.images_found} found. "
        f"Confidence: {result.confidence_level or 'unknown'}[/dim]"
    )
    _display_property(result.property)

    if json_out:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        with open(json_out, "w") as f:
            json.dump({"property": result.property}, f, indent=2)
        console.print(f"  JSON: {json_out}")

    if then_rate:
        console.print()
        _rate_and_report(RatingEngine(profile=profile), result.property, save, None, None)


@app.command()
def brand(
    name: str = typer.Argument(..., help="Brand name, e.g. 'Hampton Inn'"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to rating config YAML"),
) -> None:
    """Show the tier and typical property defaults for a brand."""
    try:
        catalog = get_brand_catalog(load_config(config_path))
    except (HotelRaterError, FileNotFoundError) as e:
        _fail(str(e))

    tier = catalog.resolve_tier(name)
    table = Table(title=f"Brand: {name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("tier", tier or "(none)")
    table.add_row("default service type", catalog.service_type_for_tier(tier))
    table.add_row("property multiplier", f"{catalog.property_multiplier(tier):.2f}")

    defaults = catalog.resolve_defaults(name)
    if defaults:
        for key, value in defaults.to_dict().items():
            if key == "amenities":
                value = ", ".join(k for k, v in value.items() if v) or "none"
            table.add_row(key, str(value))
    else:
        console.print("[dim]No brand defaults on file.[/dim]")
    console.print(table)


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Max quotes to show"),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Export the listed quotes as JSON"),
    csv_out: Optional[Path] = typer.Option(None, "--csv-out", help="Export the listed quotes as CSV"),
) -> None:
    """List recently saved quotes."""
    storage = _get_storage()
    quotes = storage.load_quotes(limit=limit)
    storage.close()

    if not quotes:
        console.print("[yellow]No saved quotes. Run 'rate --save' first.[/yellow]")
        return

    table = Table(title="Saved Quotes")
    table.add_column("Quote", style="dim")
    table.add_column("Property", style="cyan")
    table.add_column("State")
    table.add_column("Rooms", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Grade")
    table.add_column("Created", style="dim")
    for q in quotes:
        table.add_row(
            q["quote_id"],
            q.get("property_name") or "",
            q.get("state") or "",
            str(q.get("room_count") or ""),
            _money(q.get("total_estimated_premium") or 0),
            q.get("risk_grade") or "",
            str(q.get("created_at") or "")[:19],
        )
    console.print(table)

    results = [RatingResult(**q["full_result"]) for q in quotes if isinstance(q.get("full_result"), dict)]
    if json_out:
        export_json(results, json_out)
        console.print(f"  JSON: {json_out}")
    if csv_out:
        export_csv(results, csv_out)
        console.print(f"  CSV:  {csv_out}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(3001, "--port", "-p", help="Port"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to rating config YAML"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from .api import create_app

    try:
        api = create_app(config_path=config_path)
    except (HotelRaterError, FileNotFoundError) as e:
        _fail(str(e))
    uvicorn.run(api, host=host, port=port)


if __name__ == "__main__":
    app()
