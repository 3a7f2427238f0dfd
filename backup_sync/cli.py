"""Command-line interface for backup-sync."""

import logging
import os
import sys
import click
from typing import Any, Dict, Optional

from .core.exceptions import BackupError, ConfigurationError
from .core.filters import compile_exclude, parse_min_date
from .core.runner import BackupRunner
from .config.config_manager import ConfigManager
from .reporters.email_reporter import EmailReporter
from .utils.formatters import format_pending_json, format_pending_text


def setup_logging(level: str, log_file: Optional[str] = None):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    console_handler.setLevel(numeric_level)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(numeric_level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _validate_location(value: str) -> str:
    if not os.path.isdir(value):
        raise click.BadParameter(f"Invalid location: {value}")
    return value


def _validate_date(value: str) -> str:
    try:
        parse_min_date(value)
    except ConfigurationError as e:
        raise click.BadParameter(str(e))
    return value


def _validate_pattern(value: str) -> str:
    try:
        compile_exclude(value)
    except ConfigurationError as e:
        raise click.BadParameter(str(e))
    return value


def prompt_for_config(provided: Dict[str, Any]) -> Dict[str, Any]:
    """Interactively build a configuration dictionary.

    Values already given on the command line are used without prompting.
    """
    def ask(key, text, **kwargs):
        if provided.get(key) is not None:
            return provided[key]
        return click.prompt(text, **kwargs)

    backup = {
        'source': ask('source', 'Enter the backup source location',
                      value_proc=_validate_location),
        'destination': ask('destination', 'Enter the backup destination drive',
                           value_proc=_validate_location),
        'date': ask('date', 'Enter the min. file date (leave blank to include all)',
                    default='', show_default=False, value_proc=_validate_date) or None,
        'exclude': ask('exclude', 'Enter a regex used to exclude files (leave blank to include all)',
                       default='', show_default=False, value_proc=_validate_pattern) or None,
        'test_mode': ask('test_mode', 'Do you want to run in test mode? Backup will be calculated but not performed',
                         default=False, type=bool),
    }
    config: Dict[str, Any] = {'backup': backup}

    send_email = click.confirm('Do you want to receive a mail log summary?', default=False)
    config['summary'] = {'send_email': send_email}

    if send_email:
        receiver = click.prompt('Enter a mail address to receive a log summary')
        config['email'] = {
            'smtp_server': click.prompt('Enter the SMTP server', default='smtp.gmail.com'),
            'smtp_port': click.prompt('Enter the SMTP port', default=587, type=int),
            'smtp_user': click.prompt('Enter the SMTP user (leave blank for none)',
                                      default='', show_default=False) or None,
            'from_address': click.prompt('Enter a mail address used to send logs (leave blank to use the receiver)',
                                         default='', show_default=False) or None,
            'to_addresses': [receiver],
            'use_tls': True,
        }
        if config['email']['smtp_user']:
            config['email']['smtp_pass'] = click.prompt('Enter the password for this mail address',
                                                        hide_input=True)

    return config


def confirm_erase(root: str) -> bool:
    """Ask whether a non-empty new volume may be erased."""
    answer = click.prompt(f"Disk {root} is not empty. Type 'yes' to confirm erasing it",
                          default='', show_default=False)
    return answer.strip().lower() == 'yes'


def _apply_logging_config(ctx, logging_config: Dict[str, Any]):
    """Use the configured logging settings unless given on the command line."""
    if ctx.obj.get('log_level') or ctx.obj.get('log_file'):
        return
    setup_logging(logging_config.get('level') or 'INFO', logging_config.get('file'))


def _yes_no(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.upper() == 'Y'


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file',
              help='Log file path')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: str, log_file: Optional[str]):
    """backup-sync - Incremental backups onto removable volumes."""

    ctx.ensure_object(dict)

    setup_logging(log_level or 'INFO', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_file'] = log_file
    ctx.obj['log_level'] = log_level


@cli.command()
@click.option('--source', help='Source folder to backup')
@click.option('--destination', help='Backup destination, a disk root is assumed')
@click.option('--backup-date', help='Files modified before this date are ignored')
@click.option('--exclude', help='Regex excluding files by name')
@click.option('--test-mode', type=click.Choice(['Y', 'N'], case_sensitive=False),
              help="Don't copy anything, just print a preview (Y/N)")
@click.option('--force-erase', is_flag=True,
              help="Don't ask before erasing a non-empty new destination")
@click.option('--send-mail-summary', type=click.Choice(['Y', 'N'], case_sensitive=False),
              help='Send a summary of the backup by mail (Y/N)')
@click.option('--reset-config', is_flag=True,
              help='Generate a new configuration, replacing the existing one')
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Preview output format')
@click.pass_context
def run(ctx, source, destination, backup_date, exclude, test_mode, force_erase,
        send_mail_summary, reset_config, output):
    """Run an incremental backup."""
    overrides = {
        'source': source,
        'destination': destination,
        'date': backup_date,
        'exclude': exclude,
        'test_mode': _yes_no(test_mode),
        'force_erase': True if force_erase else None,
    }

    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))

        if reset_config or not config_manager.config_exists():
            if reset_config:
                click.echo("Warning: existing config will be reset!")
            else:
                click.echo("Config file not found - generating new configuration...")
            generated = prompt_for_config(overrides)
            path = config_manager.save_config(generated)
            click.echo(f"Configuration written to {path}")

        config_manager.load_config(overrides)
        _apply_logging_config(ctx, config_manager.get_logging_config())
        backup_config = config_manager.get_backup_config()

        send_email = config_manager.get_summary_config().get('send_email', False)
        if send_mail_summary is not None:
            send_email = _yes_no(send_mail_summary)

        email_reporter = None
        email_config = config_manager.get_email_config()
        if send_email:
            if not email_config:
                raise ConfigurationError("Email summary requested but email is not configured")
            email_reporter = EmailReporter.from_config(email_config)

        runner = BackupRunner(
            backup_config,
            confirm_erase=confirm_erase,
            email_reporter=email_reporter,
            run_as_user=config_manager.get_run_as_user(),
            logger=logging.getLogger('backup_sync.run')
        )

        click.echo("backup-sync - Welcome!\n")
        result = runner.run()

        if result.test_mode:
            if output == 'json':
                click.echo(format_pending_json(result.pending))
            else:
                click.echo(format_pending_text(result.pending))

        click.echo("\nbackup-sync finished execution - Goodbye!")

    except BackupError as e:
        click.echo(f"Error: {e}", err=True)
        if getattr(e, 'permission_denied', False):
            click.echo("Run backup-sync with sufficient privileges for this volume.", err=True)
        sys.exit(1)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option('--path', 'path', help='Where to write the configuration file')
@click.pass_context
def init_config(ctx, path: Optional[str]):
    """Interactively generate a configuration file."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config = prompt_for_config({})
        written = config_manager.save_config(config, path)
        click.echo(f"✅ Configuration written to {written}")
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config_manager.load_config()
        backup_config = config_manager.get_backup_config()

        click.echo("✅ Configuration loaded successfully")

        click.echo(f"\n📊 Configuration Summary:")
        click.echo(f"   Source: {backup_config.backup_source}")
        click.echo(f"   Destination: {backup_config.backup_destination}")
        click.echo(f"   Min. date: {backup_config.backup_date or 'none'}")
        click.echo(f"   Exclude: {backup_config.exclude.pattern if backup_config.exclude else 'none'}")
        click.echo(f"   Test mode: {'yes' if backup_config.test_mode else 'no'}")

        email_config = config_manager.get_email_config()
        if email_config:
            email_reporter = EmailReporter.from_config(email_config)
            click.echo(f"   📧 Email configured: {email_reporter.from_address}")

            email_errors = email_reporter.validate_configuration()
            if email_errors:
                click.echo("\n⚠️  Email configuration issues:")
                for error in email_errors:
                    click.echo(f"     • {error}")
            else:
                click.echo("\n✅ Email configuration valid")
        else:
            click.echo("   📧 Email: Not configured")

    except (ConfigurationError, FileNotFoundError) as e:
        click.echo(f"❌ Configuration validation failed: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def test_email(ctx):
    """Send a test email to verify email configuration."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config_manager.load_config(check_paths=False)
        email_config = config_manager.get_email_config()

        if not email_config:
            click.echo("❌ Email not configured - cannot send test email", err=True)
            sys.exit(1)

        email_reporter = EmailReporter.from_config(email_config)

        errors = email_reporter.validate_configuration()
        if errors:
            click.echo("❌ Email configuration errors:")
            for error in errors:
                click.echo(f"   • {error}")
            sys.exit(1)

        click.echo("Sending test email...")

        if email_reporter.send_test_email():
            click.echo("✅ Test email sent successfully!")
            click.echo(f"   Recipients: {', '.join(email_reporter.to_addresses)}")
        else:
            click.echo("❌ Failed to send test email", err=True)
            sys.exit(1)

    except (ConfigurationError, FileNotFoundError) as e:
        click.echo(f"Error sending test email: {e}", err=True)
        sys.exit(1)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
