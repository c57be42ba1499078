#!/usr/bin/env python3
"""Entry point for the mammoth-cli CLI."""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from textwrap import dedent
from typing import Any, Sequence

from mammoth import __version__
from mammoth.adapters.fs_registry_store import FSRegistryStore
from mammoth.adapters.git_checkout_provider import GitCheckoutProvider
from mammoth.app.cleanup import CleanupService
from mammoth.app.config_io import ConfigService, ValidationReport
from mammoth.app.config_io.service import IMPORT_MODES, MODE_MERGE
from mammoth.app.download import DownloadOrchestrator
from mammoth.app.info import InfoService
from mammoth.app.project import ProjectGenerator, ProjectSpec
from mammoth.app.registry import RegistryService
from mammoth.domain.cache import CacheResolver
from mammoth.domain.errors import MammothError, NotFoundError, ValidationFailedError
from mammoth.domain.registry import Registry, Template
from mammoth.ports.checkout_provider import CheckoutProvider
from mammoth.settings import SETTINGS
from mammoth.utils.telemetry import clear as clear_telemetry
from mammoth.utils.telemetry import recent_events, record_event, record_structured_event, summarize

PROG = "mammoth-cli"
DEFAULT_PROJECT_NAME = "my-awesome-project"
DEFAULT_AUTHOR = "Your Name"
DEFAULT_DESCRIPTION = "A wonderful project"

HELP_OVERVIEW = dedent(
    """
    Mammoth - frontend project scaffolding from git-hosted templates.

    Quick start:
      - mammoth-cli repo add <name> --url <git-url> [--branch main]
      - mammoth-cli template add <id> --name ... --repo <name> --path <dir> --description ...
      - mammoth-cli template download <id>
      - mammoth-cli new --template <id> --name <project>

    Running without a command starts the interactive project wizard.
    """
)


# ----------------------------------------------------------------------
# Service wiring
# ----------------------------------------------------------------------


def _build_store() -> FSRegistryStore:
    return FSRegistryStore(SETTINGS.registry_file)


def _build_resolver() -> CacheResolver:
    return CacheResolver(SETTINGS.cache_dir)


def _build_provider() -> CheckoutProvider:
    return GitCheckoutProvider(SETTINGS.download.git_executable)


def _build_orchestrator(registry: Registry) -> DownloadOrchestrator:
    return DownloadOrchestrator(registry, _build_resolver(), _build_provider(), SETTINGS)


def _git_init(project_path: Path) -> None:
    GitCheckoutProvider(SETTINGS.download.git_executable).init_repository(project_path)


def _report_error(command: str, exc: MammothError) -> int:
    print(f"error: {exc}", file=sys.stderr)
    if isinstance(exc, ValidationFailedError):
        print("Validation errors:", file=sys.stderr)
        for message in exc.errors:
            print(f"  {message}", file=sys.stderr)
    record_structured_event(
        SETTINGS,
        command,
        status="error",
        level="error",
        component="cli",
        payload={"error": exc.to_dict()},
    )
    return 1


def _print_warnings(report: ValidationReport | None) -> None:
    if report is None or not report.warnings:
        return
    print("Validation warnings:")
    for message in report.warnings:
        print(f"  {message}")


def _status_mark(cached: bool) -> str:
    return "[cached]" if cached else "[missing]"


# ----------------------------------------------------------------------
# new
# ----------------------------------------------------------------------


def _read(prompt: str) -> str:
    """Read one answer; a closed stdin counts as an empty answer."""
    try:
        return input(prompt).strip()
    except EOFError:
        print()
        return ""


def _prompt(label: str, default: str) -> str:
    response = _read(f"{label} [{default}]: ")
    return response or default


def _confirm(message: str, *, default: bool) -> bool:
    suffix = "[Y/n]" if default else "[y/N]"
    response = _read(f"{message} {suffix} ").lower()
    if not response:
        return default
    return response in {"y", "yes"}


def _select_template(registry: Registry) -> Template:
    templates = list(registry.templates)
    print("Step 1: Select Template")
    for index, template in enumerate(templates, start=1):
        print(f"  {index}. {template.id} - {template.description}")
    while True:
        choice = _read("Choose a template [1]: ")
        if not choice:
            return templates[0]
        if choice.isdigit() and 1 <= int(choice) <= len(templates):
            return templates[int(choice) - 1]
        matched = registry.template(choice)
        if matched is not None:
            return matched
        print(f"Enter a value between 1 and {len(templates)}.")


def _new_cmd(args: argparse.Namespace) -> int:
    interactive = not getattr(args, "yes", False)
    try:
        registry = _build_store().load()
    except MammothError as exc:
        return _report_error("project.new", exc)
    if not registry.templates:
        print("No templates available. Add templates first with 'template add'", file=sys.stderr)
        return 1

    template_id = getattr(args, "template", None)
    if template_id:
        template = registry.template(template_id)
        if template is None:
            return _report_error("project.new", NotFoundError("template", template_id))
    elif interactive:
        template = _select_template(registry)
    else:
        print("error: --template is required with --yes", file=sys.stderr)
        return 1

    print(f"Selected template: {template.id}")
    name = getattr(args, "name", None) or (_prompt("Project name", DEFAULT_PROJECT_NAME) if interactive else DEFAULT_PROJECT_NAME)
    author = getattr(args, "author", None) or (_prompt("Author name", DEFAULT_AUTHOR) if interactive else DEFAULT_AUTHOR)
    description = getattr(args, "description", None) or (
        _prompt("Project description", DEFAULT_DESCRIPTION) if interactive else DEFAULT_DESCRIPTION
    )
    output = getattr(args, "output", None) or (_prompt("Output directory", ".") if interactive else ".")

    spec = ProjectSpec(
        name=name,
        author=author,
        description=description,
        output_dir=Path(output).expanduser(),
        template=template,
    )
    print()
    print("Project Summary")
    print(f"  Name: {spec.name}")
    print(f"  Author: {spec.author}")
    print(f"  Description: {spec.description}")
    print(f"  Template: {template.id}")
    print(f"  Language: {template.language}")
    print(f"  Output Directory: {spec.output_dir}")
    print()
    if interactive and not _confirm("Do you want to proceed with project generation?", default=True):
        print("Project generation cancelled")
        return 0

    generator = ProjectGenerator(
        _build_orchestrator(registry),
        _build_resolver(),
        git_init=_git_init,
    )
    try:
        result = generator.generate(spec, init_git=not getattr(args, "no_git", False))
    except MammothError as exc:
        return _report_error("project.new", exc)

    if result.git_initialised:
        print("Git repository initialised")
    elif result.git_error:
        print(f"Git not available, skipping repository initialisation ({result.git_error})")
    record_event(
        SETTINGS,
        "project.new",
        {"template": template.id, "package_json": result.package_json_updated, "git": result.git_initialised},
        status="success",
    )
    print()
    print("Project generated successfully!")
    print(f"Project location: {result.project_path}")
    print()
    print("Next steps:")
    print(f"  cd {result.project_path}")
    print("  npm install  # or pnpm install")
    print("  npm run dev  # or pnpm dev")
    return 0


# ----------------------------------------------------------------------
# template
# ----------------------------------------------------------------------


def _template_cmd(args: argparse.Namespace) -> int:
    command = getattr(args, "template_command", None) or "list"
    service = RegistryService(_build_store())

    if command == "list":
        try:
            registry = service.load()
        except MammothError as exc:
            return _report_error("template.list", exc)
        resolver = _build_resolver()
        verbose = bool(getattr(args, "verbose", False))
        if getattr(args, "json", False):
            payload = [template.to_dict() | {"cached": resolver.is_cached(template)} for template in registry.templates]
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        elif not registry.templates:
            print("No templates available. Add templates first.")
        else:
            print("Available Templates" if verbose else "Template List")
            print()
            for template in registry.templates:
                mark = _status_mark(resolver.is_cached(template))
                if verbose:
                    print(f"{mark} {template.id} - {template.name}")
                    print(f"   Description: {template.description}")
                    print(f"   Language: {template.language}")
                    print(f"   Repository: {template.repo}")
                    print(f"   Path: {template.path}")
                    print(f"   Tags: {', '.join(template.tags)}")
                    print()
                else:
                    print(f"{mark} {template.id} - {template.name} ({template.language})")
            if not verbose:
                print()
                print("Use --verbose to see detailed information")
        record_event(SETTINGS, "template.list", {"count": len(registry.templates)})
        return 0

    if command == "download":
        try:
            registry = service.load()
            template = registry.template(args.template_id)
            if template is None:
                raise NotFoundError("template", args.template_id)
            result = _build_orchestrator(registry).download(template, force=args.force)
        except MammothError as exc:
            return _report_error("template.download", exc)
        if not result.skipped:
            print(f"Template '{template.id}' is ready")
        return 0

    if command == "download-all":
        try:
            registry = service.load()
        except MammothError as exc:
            return _report_error("template.download_all", exc)
        print("Downloading all templates...")
        report = _build_orchestrator(registry).download_all(force=args.force)
        summary = report.summary()
        record_event(SETTINGS, "template.download_all", summary, status="success" if report.completed else "error")
        if report.completed:
            print(f"All templates downloaded! ({summary['downloaded']} downloaded, {summary['cached']} cached)")
            return 0
        print(f"Finished with {summary['failed']} failure(s):", file=sys.stderr)
        for outcome in report.failures:
            print(f"  {outcome.template_id}: {outcome.error}", file=sys.stderr)
        return 1

    if command == "add":
        try:
            template = service.add_template(
                args.template_id,
                args.name,
                args.repo,
                args.path,
                args.description,
                args.language,
                args.tags,
            )
        except MammothError as exc:
            return _report_error("template.add", exc)
        record_event(SETTINGS, "template.add", {"id": template.id, "repo": template.repo})
        print(f"Template '{template.id}' added successfully!")
        return 0

    if command == "remove":
        try:
            service.remove_template(args.template_id)
        except MammothError as exc:
            return _report_error("template.remove", exc)
        record_event(SETTINGS, "template.remove", {"id": args.template_id})
        print(f"Template '{args.template_id}' removed successfully!")
        return 0

    print("Unsupported template command", file=sys.stderr)
    return 2


# ----------------------------------------------------------------------
# repo
# ----------------------------------------------------------------------


def _repo_cmd(args: argparse.Namespace) -> int:
    command = getattr(args, "repo_command", None) or "list"
    service = RegistryService(_build_store())

    if command == "list":
        try:
            repositories = service.list_repositories()
        except MammothError as exc:
            return _report_error("repo.list", exc)
        if getattr(args, "json", False):
            payload = [{"name": repo.name, "url": repo.url, "branch": repo.branch} for repo in repositories]
            print(json.dumps(payload, ensure_ascii=False, indent=2))
            return 0
        print("Configured Template Repositories")
        print()
        if not repositories:
            print("No repositories configured. Add repositories first.")
            return 0
        for repo in repositories:
            print(f"{repo.name} - {repo.url}")
            print(f"   Branch: {repo.branch}")
            print()
        return 0

    if command == "add":
        try:
            repo = service.add_repository(
                args.repo_name,
                args.url,
                args.branch,
                auth_token=args.auth_token,
                username=args.username,
            )
        except MammothError as exc:
            return _report_error("repo.add", exc)
        record_event(SETTINGS, "repo.add", {"name": repo.name, "branch": repo.branch, "auth": repo.has_credentials})
        print(f"Repository '{repo.name}' added successfully!")
        return 0

    if command == "remove":
        try:
            service.remove_repository(args.repo_name)
        except MammothError as exc:
            return _report_error("repo.remove", exc)
        record_event(SETTINGS, "repo.remove", {"name": args.repo_name})
        print(f"Repository '{args.repo_name}' removed successfully!")
        return 0

    print("Unsupported repo command", file=sys.stderr)
    return 2


# ----------------------------------------------------------------------
# config
# ----------------------------------------------------------------------


def _config_cmd(args: argparse.Namespace) -> int:
    command = getattr(args, "config_command", None)
    service = ConfigService(_build_store())

    if command == "export":
        output = Path(args.output).expanduser()
        print(f"Exporting configuration to: {output}")
        if args.include_cache:
            print("Note: --include-cache is reserved; cache state is not part of the exported file")
        try:
            result = service.export_file(output, include_cache_info=args.include_cache)
        except MammothError as exc:
            return _report_error("config.export", exc)
        record_event(
            SETTINGS,
            "config.export",
            {"repositories": result.repositories, "templates": result.templates, "include_cache": args.include_cache},
        )
        print("Configuration exported successfully!")
        print(f"Exported {result.repositories} repositories and {result.templates} templates")
        return 0

    if command == "import":
        source = Path(args.file).expanduser()
        print(f"Importing configuration from: {source}")
        start = time.perf_counter()
        try:
            result = service.import_file(source, args.mode, skip_validation=args.skip_validation)
        except MammothError as exc:
            return _report_error("config.import", exc)
        _print_warnings(result.report)
        registry = result.registry
        if result.mode == MODE_MERGE:
            print(f"Merged {result.repositories_merged} repositories and {result.templates_merged} templates")
        else:
            print("Configuration overwritten")
        record_structured_event(
            SETTINGS,
            "config.import",
            status="success",
            component="config",
            duration_ms=(time.perf_counter() - start) * 1000,
            payload={
                "mode": result.mode,
                "repositories": result.repositories_merged,
                "templates": result.templates_merged,
                "skip_validation": args.skip_validation,
            },
        )
        print("Configuration imported successfully!")
        print(
            f"Current configuration: {len(registry.repositories)} repositories and {len(registry.templates)} templates"
        )
        return 0

    if command == "validate":
        source = Path(args.file).expanduser()
        print(f"Validating configuration file: {source}")
        try:
            registry, report = service.validate_file(source)
            report.raise_for_errors()
        except MammothError as exc:
            return _report_error("config.validate", exc)
        _print_warnings(report)
        record_event(SETTINGS, "config.validate", {"warnings": len(report.warnings)})
        print("Configuration file is valid!")
        print(f"Contains {len(registry.repositories)} repositories and {len(registry.templates)} templates")
        return 0

    print("Unsupported config command", file=sys.stderr)
    return 2


# ----------------------------------------------------------------------
# clean / info
# ----------------------------------------------------------------------


def _clean_cmd(args: argparse.Namespace) -> int:
    include_config = bool(args.all)
    if not args.force:
        if include_config:
            message = "This will remove ALL templates, cache, and configuration. Are you sure?"
        else:
            message = "This will remove ALL cached template files. Are you sure?"
        if not _confirm(message, default=False):
            print("Clean operation cancelled")
            return 0

    print("Cleaning templates...")
    service = CleanupService(SETTINGS, _build_store())
    try:
        report = service.clean(include_config=include_config)
    except MammothError as exc:
        return _report_error("clean", exc)
    if report.cache_removed:
        print("Cache directory cleaned")
    if report.config_removed:
        print("Configuration file removed")
    record_event(
        SETTINGS,
        "clean",
        {"all": include_config, "cache_removed": report.cache_removed, "config_removed": report.config_removed},
    )
    print("Clean operation completed!")
    if include_config:
        print("Configuration has been reset to empty state")
    else:
        print("Configuration preserved, only cache was cleaned")
    return 0


def _info_cmd(args: argparse.Namespace) -> int:
    service = InfoService(SETTINGS, _build_store(), _build_resolver())
    record_structured_event(SETTINGS, "info.collect", status="start", component="info")
    start = time.perf_counter()
    try:
        payload = service.collect().data
    except MammothError as exc:
        return _report_error("info.collect", exc)

    if getattr(args, "json", False):
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_info_summary(payload)

    record_structured_event(
        SETTINGS,
        "info.collect",
        status="success",
        component="info",
        duration_ms=(time.perf_counter() - start) * 1000,
        payload={"templates": payload["statistics"]["templates"]},
    )
    return 0


def _print_info_summary(payload: dict[str, Any]) -> None:
    print(f"{PROG} version: {payload.get('version', 'unknown')}")
    print()
    print("Repositories")
    repositories = payload.get("repositories", [])
    if not repositories:
        print("  No repositories configured")
    for repo in repositories:
        print(f"  {repo['name']} - {repo['url']}")
        print(f"    Branch: {repo['branch']}")
    print()
    print("Templates")
    templates = payload.get("templates", [])
    if not templates:
        print("  No templates configured")
    for template in templates:
        print(f"  {_status_mark(template['cached'])} {template['id']} - {template['name']}")
        print(f"    Description: {template['description']}")
        print(f"    Language: {template['language']}")
        print(f"    Repository: {template['repo']}")
        print(f"    Path: {template['path']}")
        print(f"    Tags: {', '.join(template['tags'])}")
    print()
    stats = payload.get("statistics", {})
    print("Statistics")
    print(f"  Repositories: {stats.get('repositories', 0)}")
    print(f"  Templates: {stats.get('templates', 0)}")
    print(f"  Cached templates: {stats.get('cached_templates', 0)}/{stats.get('templates', 0)}")
    print()
    paths = payload.get("paths", {})
    print("Paths")
    print(f"  Config: {paths.get('config')}")
    print(f"  Cache: {paths.get('cache')}")
    print(f"  Logs: {paths.get('logs')}")


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


# ----------------------------------------------------------------------
# telemetry
# ----------------------------------------------------------------------


def _telemetry_cmd(args: argparse.Namespace) -> int:
    command = args.telemetry_command or "report"
    if command == "report":
        events = recent_events(SETTINGS, args.recent or 0)
        print(json.dumps(summarize(events), ensure_ascii=False, indent=2))
        return 0
    if command == "tail":
        for event in recent_events(SETTINGS, max(args.limit, 1)):
            print(json.dumps(event, ensure_ascii=False))
        return 0
    if command == "clear":
        if clear_telemetry(SETTINGS):
            print("Telemetry log cleared")
        else:
            print("Telemetry log is already empty")
        return 0
    print(f"Unsupported telemetry command: {command}", file=sys.stderr)
    return 2

def _add_new_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-t", "--template", help="Template ID")
    parser.add_argument("-n", "--name", help="Project name")
    parser.add_argument("-o", "--output", help="Output directory (default: current directory)")
    parser.add_argument("--author", help="Author written to package.json")
    parser.add_argument("--description", help="Description written to package.json")
    parser.add_argument("-y", "--yes", action="store_true", help="Skip prompts and use defaults")
    parser.add_argument("--no-git", action="store_true", help="Do not run git init in the new project")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}")
    parser.set_defaults(
        func=_new_cmd,
        template=None,
        name=None,
        output=None,
        author=None,
        description=None,
        yes=False,
        no_git=False,
    )

    sub = parser.add_subparsers(dest="command")

    new_cmd = sub.add_parser("new", help="Create a new project")
    _add_new_arguments(new_cmd)
    new_cmd.set_defaults(func=_new_cmd)

    template_cmd = sub.add_parser("template", help="Template management")
    template_cmd.set_defaults(func=_template_cmd, template_command="list", verbose=False, json=False)
    template_sub = template_cmd.add_subparsers(dest="template_command")

    template_list = template_sub.add_parser("list", help="List all available templates")
    template_list.add_argument("-v", "--verbose", action="store_true", help="Show detailed information")
    template_list.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    template_list.set_defaults(func=_template_cmd, template_command="list")

    template_download = template_sub.add_parser("download", help="Download/update a specific template")
    template_download.add_argument("template_id", help="Template ID")
    template_download.add_argument("-f", "--force", action="store_true", help="Re-download even when cached")
    template_download.set_defaults(func=_template_cmd, template_command="download")

    template_download_all = template_sub.add_parser("download-all", help="Download/update all templates")
    template_download_all.add_argument("-f", "--force", action="store_true", help="Re-download even when cached")
    template_download_all.set_defaults(func=_template_cmd, template_command="download-all")

    template_add = template_sub.add_parser("add", help="Add a new template")
    template_add.add_argument("template_id", help="Template ID")
    template_add.add_argument("-n", "--name", required=True, help="Template name")
    template_add.add_argument("-r", "--repo", required=True, help="Repository name")
    template_add.add_argument("-p", "--path", required=True, help="Template path in repository")
    template_add.add_argument("-d", "--description", required=True, help="Template description")
    template_add.add_argument("-l", "--language", default="vue", help="Language (default: vue)")
    template_add.add_argument("-t", "--tags", help="Tags (comma-separated)")
    template_add.set_defaults(func=_template_cmd, template_command="add")

    template_remove = template_sub.add_parser("remove", help="Remove a template")
    template_remove.add_argument("template_id", help="Template ID")
    template_remove.set_defaults(func=_template_cmd, template_command="remove")

    repo_cmd = sub.add_parser("repo", help="Repository management")
    repo_cmd.set_defaults(func=_repo_cmd, repo_command="list", json=False)
    repo_sub = repo_cmd.add_subparsers(dest="repo_command")

    repo_add = repo_sub.add_parser("add", help="Add a new repository")
    repo_add.add_argument("repo_name", help="Repository name")
    repo_add.add_argument("-u", "--url", required=True, help="Repository URL")
    repo_add.add_argument("-b", "--branch", default="main", help="Branch (default: main)")
    repo_add.add_argument("--auth-token", help="Access token for private http(s) repositories")
    repo_add.add_argument("--username", help="Username paired with --auth-token")
    repo_add.set_defaults(func=_repo_cmd, repo_command="add")

    repo_remove = repo_sub.add_parser("remove", help="Remove a repository")
    repo_remove.add_argument("repo_name", help="Repository name")
    repo_remove.set_defaults(func=_repo_cmd, repo_command="remove")

    repo_list = repo_sub.add_parser("list", help="List all repositories")
    repo_list.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    repo_list.set_defaults(func=_repo_cmd, repo_command="list")

    config_cmd = sub.add_parser("config", help="Configuration management")
    config_sub = config_cmd.add_subparsers(dest="config_command", required=True)

    config_export = config_sub.add_parser("export", help="Export configuration to file")
    config_export.add_argument("-o", "--output", required=True, help="Output file path (.json, .yaml)")
    config_export.add_argument("-i", "--include-cache", action="store_true", help="Include cache information (reserved)")
    config_export.set_defaults(func=_config_cmd, config_command="export")

    config_import = config_sub.add_parser("import", help="Import configuration from file")
    config_import.add_argument("-f", "--file", required=True, help="Input file path (.json, .yaml)")
    config_import.add_argument(
        "-m",
        "--mode",
        default=MODE_MERGE,
        help=f"Import mode: {' or '.join(IMPORT_MODES)} (default: {MODE_MERGE})",
    )
    config_import.add_argument("-s", "--skip-validation", action="store_true", help="Skip validation")
    config_import.set_defaults(func=_config_cmd, config_command="import")

    config_validate = config_sub.add_parser("validate", help="Validate configuration file")
    config_validate.add_argument("file", help="Configuration file path")
    config_validate.set_defaults(func=_config_cmd, config_command="validate")

    clean_cmd = sub.add_parser("clean", help="Clean configuration and cache")
    clean_cmd.add_argument("-a", "--all", action="store_true", help="Also remove configuration file")
    clean_cmd.add_argument("-f", "--force", action="store_true", help="Skip confirmation")
    clean_cmd.set_defaults(func=_clean_cmd)

    info_cmd = sub.add_parser("info", help="Show configuration information")
    info_cmd.add_argument("-j", "--json", action="store_true", help="Show as JSON format")
    info_cmd.set_defaults(func=_info_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect the local event log")
    telemetry_cmd.set_defaults(func=_telemetry_cmd, telemetry_command="report", recent=None)
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command")

    telemetry_report = telemetry_sub.add_parser("report", help="Summarise recorded events")
    telemetry_report.add_argument("--recent", type=int, help="Only summarise the newest N events")
    telemetry_report.set_defaults(func=_telemetry_cmd, telemetry_command="report")

    telemetry_tail = telemetry_sub.add_parser("tail", help="Print the newest events as JSON lines")
    telemetry_tail.add_argument("--limit", type=int, default=20, help="Number of events to print")
    telemetry_tail.set_defaults(func=_telemetry_cmd, telemetry_command="tail")

    telemetry_clear = telemetry_sub.add_parser("clear", help="Delete the event log")
    telemetry_clear.set_defaults(func=_telemetry_cmd, telemetry_command="clear")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
