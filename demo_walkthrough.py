"""
End-to-end walkthrough of the tracker against a scratch data directory.

This script exercises:
1. Configuration loading
2. Registry edits and dose logging with write-through persistence
3. Reloading state from disk, including a corrupt slot
4. Today's completion and the rolling weekly insights

Run with: uv run python demo_walkthrough.py
"""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dose.app import open_tracker, today_completion, weekly_insights
from dose.config import AppConfig, StorageConfig, configure_logging, get_config
from dose.domain.models import NOTICE_MESSAGES, Notice

console = Console()


def show_notice(notice: Notice) -> None:
    console.print(f"  {NOTICE_MESSAGES[notice]}", style="dim")


def check_registry_and_log(config: AppConfig) -> bool:
    console.print(Panel("Registry and dose log", style="blue"))

    tracker = open_tracker(config, on_notice=show_notice)
    console.print(f"Loaded {len(tracker.list_medications())} medications (seed list on first run)")

    aspirin = tracker.add_medication("Aspirin", 2, unit="tab")
    skipped = tracker.add_medication("   ")
    if aspirin is None or skipped is not None:
        console.print("Unexpected add_medication result", style="red")
        return False

    first = tracker.log_dose(aspirin.id)
    tracker.log_dose(aspirin.id)
    tracker.delete_dose_event(first.id)

    today = tracker.today()
    console.print(f"Aspirin today: {tracker.count_for_day(aspirin.id, today)}/{aspirin.frequency}")
    console.print(f"Daily goals: {today_completion(tracker)}% completed")
    return tracker.count_for_day(aspirin.id, today) == 1


def check_reload(config: AppConfig) -> bool:
    console.print(Panel("Reload and recovery", style="blue"))

    before = open_tracker(config).snapshot()
    after = open_tracker(config).snapshot()
    if before != after:
        console.print("State changed across reload", style="red")
        return False
    console.print(
        f"Round-trip kept {len(after.medications)} medications and {len(after.events)} doses"
    )

    events_file = Path(config.storage.data_dir) / f"{config.storage.events_key}.json"
    events_file.write_text("{not json", encoding="utf-8")
    recovered = open_tracker(config).snapshot()
    console.print(f"Corrupt dose log recovered with {len(recovered.events)} events", style="yellow")
    return recovered.events == () and recovered.medications == after.medications


def check_insights(config: AppConfig) -> bool:
    console.print(Panel("Weekly insights", style="blue"))

    day = datetime.now().astimezone() - timedelta(days=6)
    tracker = open_tracker(config, clock=lambda: day)
    vitamin = tracker.list_medications()[0]
    for _ in range(7):
        tracker.log_dose(vitamin.id)
        day += timedelta(days=1)

    table = Table(title=f"Last {config.adherence.window_days} days")
    table.add_column("Medication", style="cyan")
    table.add_column("Doses", style="white")
    table.add_column("Rate", style="white")
    table.add_column("Advice", style="white")

    stats = weekly_insights(open_tracker(config), config)
    for entry in stats:
        table.add_row(
            entry.medication.name,
            " ".join(str(d.count) for d in entry.daily_history),
            f"{entry.adherence_rate}%",
            entry.advice,
        )

    console.print(table)
    return len(stats) == len(tracker.list_medications())


def run_walkthrough() -> None:
    console.print(Panel("Dose - system walkthrough", style="bold blue"))

    with tempfile.TemporaryDirectory() as scratch:
        base = get_config()
        config = base.model_copy(update={"storage": StorageConfig(data_dir=scratch)})
        configure_logging(config.logging)

        checks = [
            ("Registry and dose log", check_registry_and_log),
            ("Reload and recovery", check_reload),
            ("Weekly insights", check_insights),
        ]

        results = []
        for name, check in checks:
            console.print(f"\n{'=' * 60}")
            try:
                results.append((name, check(config)))
            except Exception as e:
                console.print(f"{name} failed with exception: {e}", style="red")
                results.append((name, False))

    summary_table = Table()
    summary_table.add_column("Check", style="cyan")
    summary_table.add_column("Result", style="white")
    for name, ok in results:
        summary_table.add_row(name, "PASSED" if ok else "FAILED")
    console.print(summary_table)

    passed = sum(1 for _, ok in results if ok)
    console.print(f"\nResults: {passed}/{len(results)} checks passed")


if __name__ == "__main__":
    try:
        run_walkthrough()
    except KeyboardInterrupt:
        console.print("\nStopped by user", style="yellow")
