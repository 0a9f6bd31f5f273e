#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

import argparse
import sys
import traceback

from datetime import datetime

from libstack.libstack_constants import PresentationMode
from libstack.libstack_common import DialogInit, SYSTEM_INFO

from libstack.installer.args.basic_args import add_basic_args
from libstack.installer.args.credentials_args import add_credentials_args
from libstack.installer.args.presentation_args import add_presentation_args
from libstack.installer.args.product_args import add_product_args

from libstack.installer.configs.configuration_items import ALL_CONFIG_ITEMS_DICT
from libstack.installer.configs.constants.enums import ControlFlow, InstallerResult

from libstack.installer.core.cleanup import CleanupHandler
from libstack.installer.core.option_resolver import OptionResolver
from libstack.installer.core.sequencer import Sequencer

from libstack.installer.platforms import get_platform_installer

from libstack.installer.ui.prompt_ui import get_installer_ui

from libstack.installer.utils.env_file_utils import write_env_file
from libstack.installer.utils.exceptions import (
    InstallerConfigError,
    OperatorInterrupt,
    PreconditionError,
    ProvisioningError,
)
from libstack.installer.utils.logger_utils import InstallerLogger
from libstack.installer.utils.settings_file_handler import SettingsFileHandler
from libstack.installer.utils.summary_utils import build_configuration_summary_items, format_summary_lines

###################################################################################################
EXIT_SUCCESS = 0
EXIT_STEP_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_PRECONDITION_FAILURE = 3
EXIT_INTERRUPTED = 130


def build_arg_parser(parser: argparse.ArgumentParser) -> None:
    """Add arguments specific to the installer itself"""
    add_basic_args(parser)
    add_presentation_args(parser)
    add_product_args(parser)
    add_credentials_args(parser)


def determine_presentation_mode(parsed_args: argparse.Namespace) -> PresentationMode:
    """Determine which interface mode to use based on args and environment."""
    if parsed_args.non_interactive:
        return PresentationMode.MODE_SILENT
    if parsed_args.dialog:
        if DialogInit() is not None:
            return PresentationMode.MODE_DUI
        InstallerLogger.warning("The dialog program is not available; falling back to terminal prompts")
    return PresentationMode.MODE_TUI


def create_ui_implementation(presentation_mode: PresentationMode):
    """Return the prompting UI for presentation_mode, or None for an unattended run."""
    if presentation_mode == PresentationMode.MODE_SILENT:
        return None
    return get_installer_ui(use_dialog=(presentation_mode == PresentationMode.MODE_DUI))


def determine_control_flow(parsed_args: argparse.Namespace) -> ControlFlow:
    if parsed_args.dryRun:
        return ControlFlow.DRYRUN
    elif parsed_args.configOnly:
        return ControlFlow.CONFIG
    return ControlFlow.INSTALL


def command_line_values(parsed_args: argparse.Namespace) -> dict:
    """Configuration item values given on the command line (options left at None are omitted)."""
    return {
        key: getattr(parsed_args, key)
        for key in ALL_CONFIG_ITEMS_DICT
        if getattr(parsed_args, key, None) is not None
    }


def handle_config_export(parsed_args, resolver, ctx, control_flow):
    """Handle configuration export if --export-config was specified.

    Passwords are never exported. A filename ending in .env is written as
    LIBSTACK_* variables, anything else as a YAML or JSON settings file.
    """
    if parsed_args.exportConfigFile is None:
        return None

    if parsed_args.exportConfigFile == "":
        export_filename = f"libstack_settings_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        InstallerLogger.info(f"No filename specified, using default: {export_filename}")
    else:
        export_filename = parsed_args.exportConfigFile

    values = {key: ctx[key] for key in ctx}
    if export_filename.lower().endswith(".env"):
        exportable = {k: v for k, v in values.items() if k not in ctx.secret_keys}
        if control_flow.is_dry_run():
            InstallerLogger.info(f"Dry run: would write {len(exportable)} setting(s) to {export_filename}")
        else:
            write_env_file(export_filename, exportable)
            InstallerLogger.info(f"Configuration exported successfully to: {export_filename}")
    else:
        SettingsFileHandler(resolver.items).save_to_file(
            export_filename, values, dry_run=control_flow.is_dry_run()
        )
    return export_filename


def run_follow_up(platform, command):
    """Run the plan's foreground follow-up (e.g. following logs) until it exits or is interrupted."""
    InstallerLogger.info(f"Running {command.describe()} (Ctrl-C to stop)...")
    try:
        platform.run_process_streaming(
            list(command.argv),
            privileged=command.privileged,
            cwd=command.cwd,
            env=command.env,
        )
    except KeyboardInterrupt:
        InstallerLogger.info("Stopped following output; services are still running")


def main(argv=None):
    try:
        parser = argparse.ArgumentParser(description="DSpace and Koha unattended installer", conflict_handler="resolve")
        build_arg_parser(parser)
    except Exception as e:
        InstallerLogger.error(f"Failed to build installer argument parser: {e}")
        sys.exit(EXIT_STEP_FAILURE)

    parsed_args = parser.parse_args(argv)
    control_flow = determine_control_flow(parsed_args)

    if parsed_args.quiet:
        InstallerLogger.set_console_output(False)
    if parsed_args.debug:
        InstallerLogger.set_debug_enabled(True)

    # handle log file setup if --log-to-file was specified
    if parsed_args.logToFile is not None:
        if parsed_args.logToFile == "":
            log_filename = InstallerLogger.generate_timestamped_filename()
            InstallerLogger.info(f"No log filename specified, using: {log_filename}")
        else:
            log_filename = parsed_args.logToFile
        InstallerLogger.info(f"Logging to file: {log_filename}")
        InstallerLogger.set_log_file(log_filename)

    InstallerLogger.debug(f"Arguments: {sys.argv[1:] if argv is None else argv}")
    InstallerLogger.debug(f"Control flow: {control_flow.name}")

    try:
        presentation_mode = determine_presentation_mode(parsed_args)
        # dialog widgets own the screen, so hold log lines until they are gone
        if (presentation_mode == PresentationMode.MODE_DUI) and (parsed_args.logToFile is None):
            InstallerLogger.set_buffered_console(True)
        ui_impl = create_ui_implementation(presentation_mode)
        InstallerLogger.start("Determining Presentation Format")
        InstallerLogger.end(
            "Determining Presentation Format", InstallerResult.SUCCESS, f"Using {presentation_mode.name}"
        )
    except Exception as e:
        InstallerLogger.error(f"Failed to initialize the user interface: {e}")
        sys.exit(EXIT_STEP_FAILURE)

    exit_code = EXIT_SUCCESS
    try:
        InstallerLogger.start("Spawning Platform-specific Installer")
        platform = get_platform_installer(parsed_args.debug, control_flow)
        InstallerLogger.end(
            "Spawning Platform-specific Installer",
            InstallerResult.SUCCESS,
            f"Detected {SYSTEM_INFO.get('distro') or SYSTEM_INFO.get('platform_name')}",
        )

        InstallerLogger.start("Resolving Options")
        resolver = OptionResolver(
            ui=ui_impl,
            strict_passwords=parsed_args.strictPasswords,
            control_flow=control_flow,
        )
        if parsed_args.importConfigFile:
            resolver.apply_settings_file(parsed_args.importConfigFile)
            InstallerLogger.info(f"Successfully loaded settings from: {parsed_args.importConfigFile}")
        resolver.apply_environment(env_file=parsed_args.envFile)
        resolver.apply_command_line(command_line_values(parsed_args))
        ctx = resolver.resolve()
        InstallerLogger.register_secrets(ctx.secrets())
        InstallerLogger.end("Resolving Options", InstallerResult.SUCCESS, f"Deployment {ctx.deployment.value}")

        summary_lines = format_summary_lines(
            build_configuration_summary_items(resolver.items, {key: ctx[key] for key in ctx})
        )
        if ui_impl is not None:
            proceed = ui_impl.confirm_summary(summary_lines, is_dry_run=control_flow.is_dry_run())
            InstallerLogger.set_buffered_console(False)
            if not proceed:
                InstallerLogger.info("Installation cancelled")
                sys.exit(EXIT_SUCCESS)
        else:
            for line in summary_lines:
                InstallerLogger.info(line)

        handle_config_export(parsed_args, resolver, ctx, control_flow)
        if control_flow.is_config_only():
            InstallerLogger.info("Configuration only; no installation steps were run")
            sys.exit(EXIT_SUCCESS)

        InstallerLogger.start("Checking Preconditions")
        platform.check_preconditions(ctx)
        InstallerLogger.end("Checking Preconditions", InstallerResult.SUCCESS)

        plan = platform.build_plan(ctx)
        InstallerLogger.info(f"Plan {plan.name}: {len(plan)} steps")

        with CleanupHandler(plan.teardown, description=f"{plan.name} teardown") as cleanup:
            summary = Sequencer(platform, cleanup, control_flow).run(plan, ctx)

        InstallerLogger.info(
            f"{summary.count(InstallerResult.SUCCESS)} step(s) run, "
            f"{summary.count(InstallerResult.SKIPPED)} skipped"
        )
        for line in summary.lines():
            InstallerLogger.debug(line)

        if control_flow.should_run_install_steps():
            for line in plan.epilogue:
                InstallerLogger.info(line)
            if plan.follow_up is not None:
                run_follow_up(platform, plan.follow_up)

    except ProvisioningError as e:
        InstallerLogger.error(f"Installation failed at step '{e.step_name}': {e.message}")
        for outcome in e.summary:
            InstallerLogger.debug(f"{outcome.result.name:<8} {outcome.name}")
        exit_code = EXIT_STEP_FAILURE
    except InstallerConfigError as e:
        InstallerLogger.error(f"Configuration error: {e}")
        exit_code = EXIT_CONFIG_ERROR
    except PreconditionError as e:
        InstallerLogger.error(f"Precondition not met: {e}")
        exit_code = EXIT_PRECONDITION_FAILURE
    except OperatorInterrupt as e:
        InstallerLogger.error("Installation interrupted")
        exit_code = e.exit_code
    except KeyboardInterrupt:
        InstallerLogger.error("Installation interrupted")
        exit_code = EXIT_INTERRUPTED
    except Exception as e:
        InstallerLogger.error(f"Unexpected error: {e}")
        InstallerLogger.debug(traceback.format_exc())
        if not InstallerLogger.is_debug_enabled():
            InstallerLogger.error("Re-run with --debug for a traceback")
        exit_code = EXIT_STEP_FAILURE
    finally:
        InstallerLogger.set_buffered_console(False)
        InstallerLogger.clear_secrets()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
