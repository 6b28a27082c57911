# prpromptbuilder/core/repoprompt.py
"""
RepoPrompt deep links and the plain prompt text that accompanies them.

File paths in the `files` query parameter are percent-encoded one by one
(JavaScript `encodeURIComponent` rules) and then comma-joined.
"""

from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

from loguru import logger

from .models import DiffBlock, LaunchMode, ResolvedPullMeta

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def build_repoprompt_url(
    repo_full_name: str,
    branch: str,
    files: Sequence[str],
    default_root: str,
    launch_mode: LaunchMode = "workspace",
) -> Tuple[str, ResolvedPullMeta]:
    """
    Builds the `repoprompt://` URL that opens a PR's checkout.

    Args:
        repo_full_name: "owner/repo".
        branch: Head branch of the pull request.
        files: Paths to pre-select in RepoPrompt.
        default_root: Directory the user clones repositories into.
        launch_mode: "workspace" opens the named workspace, "folder" opens
            `<default_root>/<repo>` as an ephemeral folder.

    Returns:
        The URL and the metadata it was built from.
    """
    owner, _, repo = repo_full_name.partition("/")
    root_path = f"{default_root}/{repo}"

    query = ["focus=true"]
    if launch_mode == "workspace":
        base = "repoprompt://open"
        query.append(f"workspace={encode_uri_component(repo)}")
    elif launch_mode == "folder":
        base = f"repoprompt://open/{encode_uri_component(root_path)}"
        query.append("ephemeral=true")
    else:
        raise ValueError(f"unknown launch mode {launch_mode!r}")

    if files:
        query.append("files=" + ",".join(encode_uri_component(f) for f in files))

    query.sort()
    url = f"{base}?{'&'.join(query)}"
    logger.debug(f"RepoPrompt URL for {repo_full_name} ({launch_mode}): {len(files)} file(s)")
    return url, ResolvedPullMeta(owner=owner, repo=repo, branch=branch, files=list(files), root_path=root_path)


def format_diff_blocks_for_prompt(diff_blocks: Sequence[DiffBlock]) -> str:
    """Each diff as its header plus a fenced ```diff block, patch kept verbatim."""
    if not diff_blocks:
        return ""
    rendered = [f"{block.header}\n```diff\n{block.patch}\n```\n" for block in diff_blocks]
    return "\n".join(rendered).rstrip()


def pull_request_link(url: str, owner: str, repo: str, number: int) -> str:
    if "/pull/" in url:
        return url
    return f"https://github.com/{owner}/{repo}/pull/{number}"


def build_repoprompt_text(
    number: int,
    title: str,
    body: Optional[str],
    url: str,
    meta: ResolvedPullMeta,
    base_prompt: str,
    diff_blocks: Sequence[DiffBlock] = (),
) -> str:
    """
    Composes the setup instructions, base prompt, PR details, diffs and link.

    Fetching `diff_blocks` (full PR diff, last commit, ...) is the caller's job.
    """
    parts: List[str] = [
        "## SETUP",
        "```bash",
        f"cd {meta.root_path}",
        "git fetch origin",
        f"git checkout {meta.branch}",
        "```",
        "",
        base_prompt,
        "",
        f"### PR #{number}: {title}",
        "",
        body or "",
        "",
    ]

    combined_diffs = format_diff_blocks_for_prompt(diff_blocks)
    if combined_diffs.strip():
        parts.extend([combined_diffs, ""])

    parts.append(f"🔗 {pull_request_link(url, meta.owner, meta.repo, number)}")
    return "\n".join(parts)
