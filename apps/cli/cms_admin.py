"""CLI for dashboard chores: analytics reports, featured sections, invites."""

from __future__ import annotations

import json
from typing import Any, List, NoReturn, Optional

import typer

from adapters.supabase_adapter import ALL_POSTS
from adapters.wiring import build_email, build_gateway, load_env
from apps.analytics.aggregator import aggregate
from apps.analytics.periods import date_range_for_period, period_for_range
from apps.analytics.recorder import record_post_view
from apps.core.errors import CmsError
from apps.featured.reconciler import FeaturedAssignment
from apps.featured.service import FeaturedContentService

app = typer.Typer(
    name="cms-admin",
    help="Administer the Love&Pixels CMS from the command line",
    add_completion=False,
)


def _gateway():
    try:
        return build_gateway(load_env())
    except RuntimeError as exc:
        _fail(str(exc))


def _fail(message: str) -> NoReturn:
    typer.echo(f"❌ {message}", err=True)
    raise typer.Exit(code=1)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def _split_ids(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@app.command("analytics")
def analytics(
    post_id: str = typer.Option(ALL_POSTS, "--post", "-p", help="Post id, or 'all'"),
    range_label: str = typer.Option("7days", "--range", "-r", help="7days, 30days, 3months, 6months or year"),
) -> None:
    """Print the aggregated analytics summary as JSON."""
    try:
        window = date_range_for_period(period_for_range(range_label))
    except ValueError as exc:
        _fail(str(exc))
    gateway = _gateway()
    try:
        summary = aggregate(gateway.fetch_metric_rows(post_id, window))
    except CmsError as exc:
        _fail(f"Analytics unavailable: {exc}")
    _echo_json(summary.model_dump())


@app.command("record-view")
def record_view(post_id: str = typer.Argument(..., help="Post id that was viewed")) -> None:
    gateway = _gateway()
    try:
        fields = record_post_view(gateway, post_id)
    except CmsError as exc:
        _fail(str(exc))
    _echo_json({"post_id": post_id, "page_views": fields["page_views"], "unique_visitors": fields["unique_visitors"]})


@app.command("featured-show")
def featured_show() -> None:
    """Print the featured sections as they currently stand."""
    gateway = _gateway()
    try:
        assignment = FeaturedContentService(gateway).load()
    except CmsError as exc:
        _fail(str(exc))
    _echo_json(assignment.model_dump())


@app.command("featured-save")
def featured_save(
    trending: Optional[str] = typer.Option(None, help="Comma-separated post ids"),
    highlights: Optional[str] = typer.Option(None, help="Comma-separated post ids"),
    fun: Optional[str] = typer.Option(None, help="Comma-separated post ids"),
) -> None:
    """Reassign post categories so the featured sections match the given ids."""
    assignment = FeaturedAssignment(
        trending=_split_ids(trending),
        highlights=_split_ids(highlights),
        fun=_split_ids(fun),
    )
    gateway = _gateway()
    try:
        result = FeaturedContentService(gateway).save(assignment)
    except CmsError as exc:
        _fail(str(exc))
    _echo_json(
        {
            "ok": result.report.ok,
            "category_ids": result.plan.category_ids,
            "applied": result.report.applied,
            "failed": result.report.failed,
        }
    )
    if not result.report.ok:
        raise typer.Exit(code=1)


@app.command("invite")
def invite(
    email: str = typer.Option(..., "--email", "-e", help="Address to invite"),
    role: str = typer.Option(..., "--role", help="Role granted on signup"),
) -> None:
    """Send a signup invite through Brevo, respecting DRY_RUN."""
    adapter = build_email(load_env())
    result = adapter.send_invite(email, role)
    if not result.success:
        _fail(result.error or "Failed to send email")
    _echo_json({"success": True, "message_id": result.message_id})


@app.command("categories")
def categories() -> None:
    """List categories by name."""
    gateway = _gateway()
    try:
        rows = gateway.fetch_categories()
    except CmsError as exc:
        _fail(str(exc))
    _echo_json([c.model_dump() for c in rows])


if __name__ == "__main__":
    app()
