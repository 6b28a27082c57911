# prpromptbuilder/cli/main.py

from pathlib import Path
from typing import Optional, List, Dict, Set

import typer
from loguru import logger

from ..services.logging import setup_logging
from ..config.loader import get_config
from ..config.schema import PROMPT_MODES
from ..core.diff_segmenter import split_unified_diff
from ..core.payload_builder import build_clipboard_payload, format_file_selection_label
from ..core.template_renderer import render_template
from ..core.prompt_assembler import (
    compute_default_selection,
    assemble_from_state,
    file_selection_label,
    nothing_to_send,
)
from ..core.repoprompt import build_repoprompt_url
from ..core.token_counter import make_counter
from .. import __version__

from .block_loader import BlockLoadError, load_comment_blocks, make_diff_blocks

# --- Typer App ---
app = typer.Typer(help="PR PromptBuilder CLI - Build RepoPrompt prompts from pull request diffs and comments.")


def version_callback(value: bool):
    """Callback to show version and exit."""
    if value:
        typer.echo(f"PR PromptBuilder CLI Version: {__version__}")
        raise typer.Exit()


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Could not read {path}: {e}")
        raise typer.Exit(code=1)


def _parse_slots(slot_args: Optional[List[str]]) -> Dict[str, str]:
    """Turns repeated `--slot NAME=VALUE` options into a dict."""
    slots: Dict[str, str] = {}
    for arg in slot_args or []:
        name, sep, value = arg.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME=VALUE, got {arg!r}", param_hint="--slot")
        slots[name.strip()] = value
    return slots


def _known_paths(paths: List[str], all_files: List[str], option: str) -> Set[str]:
    """Drops (with a warning) paths that are not part of the diff."""
    requested = set(paths)
    unknown = requested - set(all_files)
    if unknown:
        logger.warning(f"Ignoring {option} paths not present in the diff: {sorted(unknown)}")
    return requested - unknown


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error(f"Error writing output file {output}: {e}")
        raise typer.Exit(code=1)
    logger.success(f"Output written to: {output}")


@app.callback()
def main_options(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    log_file: bool = typer.Option(True, "--log-file/--no-log-file", help="Also log to the user log directory."),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."),
):
    """Main callback to set up logging."""
    log_level = "DEBUG" if verbose else "INFO"
    setup_logging(level=log_level, verbose=verbose, log_to_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose


@app.command()
def files(
    diff: Path = typer.Argument(..., help="Unified diff file.", exists=True, dir_okay=False, readable=True),
):
    """Lists the files in a diff with their change size."""
    patches = split_unified_diff(_read_text(diff))
    for meta in patches.values():
        kind = "binary" if meta.is_binary else f"{meta.line_count} lines"
        typer.echo(f"{meta.path}\t{kind}\t{meta.byte_count} bytes")
    logger.info(f"{len(patches)} file(s) in {diff}")


@app.command()
def payload(
    diff: Path = typer.Argument(..., help="Unified diff file.", exists=True, dir_okay=False, readable=True),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help="File path to include (repeatable). Default: all files."),
    omit: Optional[List[str]] = typer.Option(None, "--omit", help="File path to leave out (repeatable)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
):
    """Builds the files-changed manifest plus the patches of the selected files."""
    patches = split_unified_diff(_read_text(diff))
    all_files = list(patches)
    selected = _known_paths(select, all_files, "--select") if select else set(all_files)
    if omit:
        selected -= _known_paths(omit, all_files, "--omit")

    logger.info(f"Selected {format_file_selection_label(len(selected), len(all_files))}")
    _emit(build_clipboard_payload(selected_files=selected, all_files=all_files, patches=patches), output)


@app.command()
def render(
    template: Path = typer.Argument(..., help="Template file with {{NAME}} slots.", exists=True, dir_okay=False, readable=True),
    slot: Optional[List[str]] = typer.Option(None, "--slot", help="Slot value as NAME=VALUE (repeatable)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
):
    """Renders a template, dropping lines left empty by missing slots."""
    slots = _parse_slots(slot)
    _emit(render_template(_read_text(template), slots), output)


@app.command()
def assemble(
    diff: Optional[List[Path]] = typer.Option(None, "--diff", "-d", help="Unified diff file (repeatable). The first one is the active diff.", exists=True, dir_okay=False, readable=True),
    diff_header: Optional[List[str]] = typer.Option(None, "--diff-header", help="Header for the matching --diff (repeatable)."),
    comments: Optional[Path] = typer.Option(None, "--comments", "-c", help="JSON array of comment blocks or threads.", exists=True, dir_okay=False, readable=True),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Template mode: implement, review, adjust-pr or respond."),
    template: Optional[Path] = typer.Option(None, "--template", "-t", help="Template file (overrides --mode).", exists=True, dir_okay=False, readable=True),
    no_template: bool = typer.Option(False, "--no-template", help="Assemble without any template."),
    text: Optional[str] = typer.Option(None, "--text", help="Your own instructions, appended last."),
    select_file: Optional[List[str]] = typer.Option(None, "--select-file", help="Only include these files of the active diff (repeatable)."),
    omit_file: Optional[List[str]] = typer.Option(None, "--omit-file", help="Leave these files of the active diff out (repeatable)."),
    exclude_block: Optional[List[str]] = typer.Option(None, "--exclude-block", help="Block id to deselect (repeatable)."),
    include_resolved: bool = typer.Option(False, "--include-resolved", help="Also select resolved comment threads."),
    count_tokens: bool = typer.Option(False, "--count-tokens", help="Log the token count of the result."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
):
    """
    Merges a template, diff and comment blocks, and your own text into one prompt.
    """
    config = get_config()

    blocks = list(make_diff_blocks([_read_text(p) for p in diff or []], diff_header))
    if comments is not None:
        try:
            blocks.extend(load_comment_blocks(comments))
        except BlockLoadError as e:
            logger.error(str(e))
            raise typer.Exit(code=1)

    state = compute_default_selection(blocks)
    if include_resolved:
        state.selected_block_ids.update(block.id for block in blocks)
    for block_id in exclude_block or []:
        if block_id not in state.selected_block_ids:
            logger.warning(f"Block '{block_id}' is not selected; nothing to exclude.")
        state.selected_block_ids.discard(block_id)

    if select_file:
        state.confirm_file_selection(_known_paths(select_file, state.all_files, "--select-file"))
    if omit_file:
        omitted = _known_paths(omit_file, state.all_files, "--omit-file")
        state.confirm_file_selection(state.effective_file_selection() - omitted)
    if state.active_diff_block_id:
        logger.info(f"Active diff {state.active_diff_block_id}: {file_selection_label(state)}")

    if no_template:
        template_text = ""
    elif template is not None:
        template_text = _read_text(template)
    else:
        if mode is not None and mode not in PROMPT_MODES:
            raise typer.BadParameter(f"Expected one of {', '.join(PROMPT_MODES)}", param_hint="--mode")
        template_text = config.template_for(mode or config.default_mode)

    user_text = text or ""
    if nothing_to_send(state.selected_block_ids, template_text, user_text):
        logger.error("Nothing to send: no blocks selected, no template and no text.")
        raise typer.Exit(code=1)

    prompt = assemble_from_state(template_text, user_text, blocks, state)

    if count_tokens:
        backend = config.token_counter_backend
        model_name = config.token_counter_model_openai if backend == "openai" else config.token_counter_model_gemini
        try:
            counter = make_counter(backend, model_name)
        except RuntimeError as e:
            logger.error(str(e))
            raise typer.Exit(code=1)
        logger.info(f"Prompt token count ({backend}): {counter.count(prompt)}")

    _emit(prompt, output)


@app.command()
def url(
    repo: str = typer.Option(..., "--repo", "-r", help="Repository as owner/name."),
    branch: str = typer.Option(..., "--branch", "-b", help="Head branch of the pull request."),
    file: Optional[List[str]] = typer.Option(None, "--file", "-f", help="File to pre-select in RepoPrompt (repeatable)."),
    launch_mode: Optional[str] = typer.Option(None, "--launch-mode", help="workspace or folder (default from config)."),
    root: Optional[str] = typer.Option(None, "--root", help="Clone root directory (default from config)."),
):
    """Prints the RepoPrompt deep link for a pull request checkout."""
    config = get_config()
    if "/" not in repo:
        raise typer.BadParameter("Expected owner/name", param_hint="--repo")
    mode = launch_mode or config.launch_mode
    if mode not in ("workspace", "folder"):
        raise typer.BadParameter("Expected 'workspace' or 'folder'", param_hint="--launch-mode")

    link, meta = build_repoprompt_url(
        repo_full_name=repo,
        branch=branch,
        files=file or [],
        default_root=root or config.default_clone_root,
        launch_mode=mode,
    )
    logger.debug(f"Resolved checkout root: {meta.root_path}")
    typer.echo(link)


if __name__ == "__main__":
    app()
