"""Command line interface for DebtCompass."""

from __future__ import annotations

import time
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import DebtCompassError
from .logging_config import setup_logging
from .models.debt import Debt, PaymentType
from .services.amortization import (
    KnownApr,
    KnownPayment,
    NoInterest,
    calculate_for_debt,
    compute,
)
from .services.debts import (
    PayoffStrategy,
    compare_extra_payment,
    sort_debts,
    to_accounts,
    total_debt,
    weighted_apr,
)
from .services.payments import paid_off_percent, record_payment
from .services.reminders import log_reminder, upcoming_payments

STRATEGY_CHOICE = click.Choice([s.value for s in PayoffStrategy], case_sensitive=False)


def _app(ctx: click.Context) -> AppContext:
    """Build the application context on first use."""
    obj = ctx.ensure_object(dict)
    if "app" not in obj:
        obj["app"] = create_app_context(obj["config"])
    return obj["app"]


def _money(value: float) -> str:
    return f"${value:,.2f}"


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Log to the console as well.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Track debts, plan payoff order and run loan calculations."""

    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = obj["app"].config if "app" in obj else BaseConfig()
    setup_logging(obj["config"], console=verbose)


@main.command("calc")
@click.argument("principal", type=float)
@click.argument("months", type=int)
@click.option("--apr", type=float, default=None, help="Annual rate in percent.")
@click.option("--payment", type=float, default=None, help="Known monthly payment; estimates the APR.")
@click.option("--schedule", "show_schedule", is_flag=True, default=False, help="Print every month.")
def calc(
    principal: float,
    months: int,
    apr: Optional[float],
    payment: Optional[float],
    show_schedule: bool,
) -> None:
    """Compute payment, interest and schedule for an installment loan."""

    if apr is not None and payment is not None:
        raise click.UsageError("Pass either --apr or --payment, not both.")
    if payment is not None:
        source = KnownPayment(monthly_amount=payment)
    elif apr:
        source = KnownApr(annual_percent=apr)
    else:
        source = NoInterest()

    result = compute(principal, months, source)
    if result is None:
        raise click.ClickException("Cannot calculate a schedule from these inputs.")

    click.echo(f"Monthly payment: {_money(result.monthly_payment)}")
    click.echo(f"Total paid:      {_money(result.total_paid)}")
    click.echo(f"Total interest:  {_money(result.total_interest)}")
    if result.estimated_apr is not None:
        click.echo(f"Estimated APR:   {result.estimated_apr:.2f}%")
    if show_schedule:
        click.echo(f"{'Month':>5} {'Payment':>12} {'Principal':>12} {'Interest':>12} {'Balance':>12}")
        for row in result.schedule:
            click.echo(
                f"{row.month:>5} {row.payment:>12,.2f} {row.principal:>12,.2f} "
                f"{row.interest:>12,.2f} {row.balance:>12,.2f}"
            )


@main.command("add")
@click.argument("name")
@click.option("--balance", type=float, required=True)
@click.option("--apr", type=float, default=0.0, show_default=True)
@click.option("--min-payment", type=float, default=0.0, show_default=True)
@click.option(
    "--type",
    "payment_type",
    type=click.Choice([t.value for t in PaymentType]),
    default=PaymentType.LUMP_SUM.value,
    show_default=True,
)
@click.option("--months", type=click.IntRange(min=1), default=None, help="Installment term.")
@click.option("--monthly-payment", type=float, default=None)
@click.option("--due-day", type=click.IntRange(1, 31), default=None)
@click.pass_context
def add_debt(
    ctx: click.Context,
    name: str,
    balance: float,
    apr: float,
    min_payment: float,
    payment_type: str,
    months: Optional[int],
    monthly_payment: Optional[float],
    due_day: Optional[int],
) -> None:
    """Store a new debt."""

    if payment_type != PaymentType.LUMP_SUM.value and months is None:
        raise click.UsageError("--months is required for installment debts.")
    if balance < 0 or apr < 0 or min_payment < 0:
        raise click.UsageError("Balance, APR and minimum payment cannot be negative.")

    debt = Debt(
        name=name,
        balance=balance,
        apr=apr,
        min_payment=min_payment,
        payment_type=payment_type,
        total_months=months,
        monthly_payment=monthly_payment,
        original_amount=balance,
        payment_due_day=due_day,
    )
    # Installment plans store the computed payment, interest-bearing ones the estimated APR.
    result = calculate_for_debt(debt)
    if result is not None:
        debt.monthly_payment = result.monthly_payment
        if not debt.min_payment:
            debt.min_payment = result.monthly_payment
        if result.estimated_apr is not None and not debt.apr:
            debt.apr = result.estimated_apr

    debt = _app(ctx).debt_repo.create(debt)
    click.echo(f"Added debt #{debt.id}: {debt.name} ({_money(debt.balance)})")


@main.command("list")
@click.option("--strategy", type=STRATEGY_CHOICE, default=None, help="Defaults to the configured strategy.")
@click.pass_context
def list_debts(ctx: click.Context, strategy: Optional[str]) -> None:
    """Show active debts in payoff order."""

    app = _app(ctx)
    strategy = strategy or app.config.DEFAULT_STRATEGY
    debts = sort_debts(to_accounts(app.debt_repo.list_active()), strategy)
    if not debts:
        click.echo("No active debts.")
        return

    for position, debt in enumerate(debts, start=1):
        marker = "*" if position == 1 else " "
        click.echo(
            f"{marker} #{debt.id} {debt.name}: {_money(debt.balance)} at {debt.apr:.2f}% APR, "
            f"{paid_off_percent(debt):.1f}% paid"
        )
    click.echo(f"Total debt: {_money(total_debt(debts))} (weighted APR {weighted_apr(debts):.2f}%)")


@main.command("pay")
@click.argument("debt_id", type=int)
@click.argument("amount", type=float)
@click.option("--note", default=None)
@click.pass_context
def pay(ctx: click.Context, debt_id: int, amount: float, note: Optional[str]) -> None:
    """Record a payment toward a debt."""

    try:
        _, debt = record_payment(_app(ctx).debt_repo, debt_id, amount, note=note)
    except DebtCompassError as exc:
        raise click.ClickException(str(exc)) from exc

    if debt.balance == 0:
        click.echo(f"{debt.name} is paid off!")
    else:
        click.echo(f"{debt.name}: {_money(debt.balance)} remaining")


@main.command("upcoming")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.pass_context
def upcoming(ctx: click.Context, limit: Optional[int]) -> None:
    """List the next payment due for each debt."""

    items = upcoming_payments(_app(ctx).debt_repo.list_active(), limit=limit)
    if not items:
        click.echo("No upcoming payments.")
        return
    for item in items:
        when = "today" if item.days_until == 0 else f"in {item.days_until} days"
        click.echo(
            f"{item.due_date.isoformat()} {item.debt.name}: {_money(item.amount)} ({when})"
        )


@main.command("remind")
@click.option("--watch", is_flag=True, default=False, help="Keep running and print reminders as they fire.")
@click.pass_context
def remind(ctx: click.Context, watch: bool) -> None:
    """Schedule payment reminders for every active debt with a due day."""

    app = _app(ctx)
    reminders = app.reminders
    if watch:
        def _echo(debt, due_date) -> None:
            log_reminder(debt, due_date)
            click.echo(f"Reminder: {debt.name} is due {due_date.isoformat()}")

        reminders.notify = _echo

    job_ids = reminders.schedule(app.debt_repo.list_active())
    for job_id in job_ids:
        job = reminders.scheduler.get_job(job_id)
        click.echo(f"{job.trigger.run_date:%Y-%m-%d %H:%M} {job.name}")
    click.echo(f"Scheduled {len(job_ids)} reminders.")
    if not watch or not job_ids:
        return

    reminders.start()
    try:
        while reminders.scheduler.get_jobs():
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        reminders.stop()


@main.command("what-if")
@click.argument("extra", type=float)
@click.option("--strategy", type=STRATEGY_CHOICE, default=None)
@click.pass_context
def what_if(ctx: click.Context, extra: float, strategy: Optional[str]) -> None:
    """Compare paying minimums against adding EXTRA every month."""

    if extra < 0:
        raise click.UsageError("EXTRA cannot be negative.")
    app = _app(ctx)
    debts = to_accounts(app.debt_repo.list_active())
    if not debts:
        click.echo("No active debts.")
        return

    comparison = compare_extra_payment(debts, strategy or app.config.DEFAULT_STRATEGY, extra)
    for label, projection in (
        ("Minimums only", comparison.baseline),
        (f"With {_money(extra)} extra", comparison.accelerated),
    ):
        months = projection.months_to_payoff
        duration = f"{months} months" if months is not None else "not paid off"
        click.echo(f"{label}: {duration}, {_money(projection.total_interest)} interest")
    click.echo(f"Interest saved: {_money(comparison.interest_saved)}")
    if comparison.months_saved is not None:
        click.echo(f"Months saved: {comparison.months_saved}")


if __name__ == "__main__":  # pragma: no cover
    main()
