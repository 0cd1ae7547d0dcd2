"""Command-line entry point."""
import argparse
import sys
from pathlib import Path

from finwise.config.manager import Config, ConfigManager
from finwise.config.settings import get_settings
from finwise.files.loader import load_files
from finwise.insights.reminders import due_reminders
from finwise.llm.assistant import ChatAssistant
from finwise.llm.gateway import build_gateway
from finwise.orchestrator.processor import AgentOrchestrator, ProcessingOutcome
from finwise.orchestrator.status import ProcessingStatus
from finwise.storage.repository import JsonFileRepository
from finwise.storage.store import StateStore
from finwise.utils.logger import get_logger, set_log_level
from finwise.utils.exceptions import ConfigError, FinWiseError

logger = get_logger()


def _load_config(args) -> Config:
    config = ConfigManager().load_config()
    if args.state:
        config.state_path = args.state
    return config


def _require_llm(config: Config) -> None:
    is_valid, message = ConfigManager().validate_config(config)
    if not is_valid:
        raise ConfigError(f"Invalid configuration: {message}")


def _store(config: Config) -> StateStore:
    return StateStore(JsonFileRepository(Path(config.state_path)))


def _print_status(status: ProcessingStatus) -> None:
    task = f" ({status.current_task})" if status.current_task else ""
    print(f"[{status.progress:>3}%] {status.message}{task}")


def _print_outcome(outcome: ProcessingOutcome) -> None:
    print(f"\n✓ Run {outcome.run_id}: {outcome.files_processed} file(s) parsed, {outcome.files_failed} failed")
    print(f"  Transactions:    {len(outcome.transactions)}")
    if outcome.analysis is not None:
        metrics = outcome.analysis.metrics
        print(f"  Income:          {metrics.total_income:,.2f}")
        print(f"  Expenses:        {metrics.total_expense:,.2f}")
        print(f"  Savings rate:    {metrics.savings_rate:.1f}%")
    print(f"  Recommendations: {len(outcome.recommendations)}")
    print(f"  Reminders:       {len(outcome.reminders)}")
    print(f"  Goals:           {len(outcome.goals)}")

    for risk in outcome.risks:
        print(f"  ! [{risk.severity}] {risk.title}: {risk.description}")
    for trend in outcome.behavioral_trends:
        print(f"  ~ [{trend.severity}] {trend.title}")


def process_command(args, config: Config) -> None:
    _require_llm(config)

    files, rejected = load_files(args.files)
    for filename, reason in rejected:
        print(f"✗ {reason}")
    if not files:
        print("No files to process.")
        sys.exit(1)

    orchestrator = AgentOrchestrator(
        build_gateway(config),
        _store(config),
        on_status_update=_print_status
    )
    outcome = orchestrator.process_files(files)
    _print_outcome(outcome)


def export_command(args, config: Config) -> None:
    data = _store(config).export_data()
    if args.output:
        Path(args.output).write_text(data, encoding="utf-8")
        print(f"✓ Exported state to {args.output}")
    else:
        print(data)


def import_command(args, config: Config) -> None:
    store = _store(config)
    state = store.import_data(Path(args.file).read_text(encoding="utf-8"))
    print(f"✓ Imported {len(state.transactions)} transactions from {args.file}")


def reminders_command(args, config: Config) -> None:
    store = _store(config)

    if args.complete:
        found = store.update_reminder(args.complete, True)
        print(f"✓ Reminder {args.complete} completed" if found else f"✗ Reminder {args.complete} not found")
        return
    if args.delete:
        found = store.delete_reminder(args.delete)
        print(f"✓ Reminder {args.delete} deleted" if found else f"✗ Reminder {args.delete} not found")
        return

    reminders = store.load().reminders
    if args.due:
        reminders = due_reminders(reminders)

    if not reminders:
        print("No reminders.")
        return

    print(f"{'Done':<5} {'Time':<20} {'Type':<13} {'ID':<24} Text")
    print("-" * 90)
    for reminder in reminders:
        done = "x" if reminder.completed else ""
        print(
            f"{done:<5} {reminder.time.strftime('%Y-%m-%d %H:%M'):<20} "
            f"{reminder.type:<13} {reminder.id:<24} {reminder.text}"
        )


def goals_command(args, config: Config) -> None:
    store = _store(config)

    if args.reset:
        store.reset_goals()
        print("✓ Goals cleared; new goals will be suggested on the next run")
        return
    if args.progress:
        goal_id, amount = args.progress
        goal = store.update_goal_progress(goal_id, float(amount))
        if goal is None:
            print(f"✗ Goal {goal_id} not found")
            sys.exit(1)
        print(f"✓ {goal.title}: {goal.current_amount:,.0f} / {goal.target_amount:,.0f} ({goal.status})")
        return

    goals = store.load().goals
    if not goals:
        print("No goals yet. Process a statement to get suggestions.")
        return

    print(f"{'Status':<10} {'Saved':>12} {'Target':>12} {'Deadline':<12} {'ID':<24} Title")
    print("-" * 100)
    for goal in goals:
        print(
            f"{goal.status:<10} {goal.current_amount:>12,.0f} {goal.target_amount:>12,.0f} "
            f"{goal.deadline.strftime('%Y-%m-%d'):<12} {goal.id:<24} {goal.title}"
        )


def chat_command(args, config: Config) -> None:
    _require_llm(config)
    assistant = ChatAssistant(build_gateway(config), _store(config))
    reply = assistant.ask(" ".join(args.question))
    print(reply.content)


def reset_command(args, config: Config) -> None:
    _store(config).clear_all_data()
    print("✓ All stored data cleared")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="finwise", description="FinWise personal finance analysis")
    parser.add_argument("--state", help="Path of the state file (default: from configuration)")
    parser.add_argument("--log-level", help="Override the log level (DEBUG, INFO, ...)")
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Analyze bank statements")
    process.add_argument("files", nargs="+", help="PDF, CSV, XLSX, XLS or TXT statements")
    process.set_defaults(func=process_command)

    export = commands.add_parser("export", help="Export the stored state as JSON")
    export.add_argument("-o", "--output", help="Write to this file instead of stdout")
    export.set_defaults(func=export_command)

    import_ = commands.add_parser("import", help="Replace the stored state with an exported JSON file")
    import_.add_argument("file")
    import_.set_defaults(func=import_command)

    reminders = commands.add_parser("reminders", help="List or update reminders")
    reminders.add_argument("--due", action="store_true", help="Only reminders due within the next hour")
    reminders.add_argument("--complete", metavar="ID", help="Mark a reminder as completed")
    reminders.add_argument("--delete", metavar="ID", help="Delete a reminder")
    reminders.set_defaults(func=reminders_command)

    goals = commands.add_parser("goals", help="List or update financial goals")
    goals.add_argument("--progress", nargs=2, metavar=("ID", "AMOUNT"), help="Record the amount saved for a goal")
    goals.add_argument("--reset", action="store_true", help="Delete all goals and suggest new ones next run")
    goals.set_defaults(func=goals_command)

    chat = commands.add_parser("chat", help="Ask a question about your finances")
    chat.add_argument("question", nargs="+")
    chat.set_defaults(func=chat_command)

    reset = commands.add_parser("reset", help="Delete all stored data")
    reset.set_defaults(func=reset_command)

    return parser


def main(argv=None):
    """Main entry point for the finwise CLI."""
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args)
        set_log_level(args.log_level or config.log_level or get_settings().log_level)
        args.func(args, config)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except (FinWiseError, RuntimeError, OSError) as e:
        logger.critical(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
