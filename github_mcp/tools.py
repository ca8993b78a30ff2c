# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub Tool Catalog

Declares every tool the server exposes. Each tool is one backend request
(see build_* functions) plus one text formatter (see format_* functions).
Formatters are pure: same payload and arguments, same text.
"""

import base64
import binascii
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote, urlencode

from github_mcp.core.errors import ToolExecutionError
from github_mcp.tool_registry import BackendRequest, RequestBuilder, ToolDescriptor, ToolRegistry

Args = Dict[str, Any]


# =============================================================================
# HELPERS
# =============================================================================

def _seg(value: Any) -> str:
    """URL-encode a single path segment"""
    return quote(str(value), safe="")


def _repo(args: Args) -> str:
    return f"/repos/{_seg(args['owner'])}/{_seg(args['repo'])}"


def _query(**params: Any) -> str:
    present = {k: _scalar(v) for k, v in params.items() if v is not None}
    return f"?{urlencode(present)}" if present else ""


def _scalar(value: Any) -> Any:
    # JSON numbers may arrive as 30.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _or(value: Any, fallback: str) -> Any:
    return value if value else fallback


def _login(user: Optional[Dict[str, Any]]) -> str:
    return (user or {}).get("login", "unknown")


def _first_line(text: Optional[str]) -> str:
    return (text or "").split("\n")[0]


def _items(payload: Any) -> List[Dict[str, Any]]:
    """Search endpoints wrap results in {"items": [...]}"""
    if isinstance(payload, dict):
        return payload.get("items", [])
    return payload or []


def _repo_schema(**extra: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "owner": {"type": "string", "description": "Repository owner"},
        "repo": {"type": "string", "description": "Repository name"},
        **extra
    }


def _schema(properties: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


_PER_PAGE = {"type": "number", "description": "Number of results per page", "default": 30}
_STATE = {"type": "string", "enum": ["open", "closed", "all"], "default": "open"}
_QUERY = {"type": "string", "description": "Search query"}


# =============================================================================
# REPOSITORIES
# =============================================================================

def format_repository(repo: Dict[str, Any], args: Args) -> str:
    return "\n".join([
        f"Repository: {repo['full_name']}",
        f"Description: {_or(repo.get('description'), 'No description')}",
        f"Language: {_or(repo.get('language'), 'Unknown')}",
        f"Stars: {repo.get('stargazers_count')}",
        f"Forks: {repo.get('forks_count')}",
        f"Created: {repo.get('created_at')}",
        f"Updated: {repo.get('updated_at')}",
        f"URL: {repo.get('html_url')}",
    ])


def format_repository_list(repos: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(
        f"{r['full_name']} - {_or(r.get('description'), 'No description')} "
        f"({_or(r.get('language'), 'Unknown')})"
        for r in repos
    )
    return f"Found {len(repos)} repositories:\n\n{lines}"


def format_created_repository(repo: Dict[str, Any], args: Args) -> str:
    return f"Created repository {repo['full_name']}\nURL: {repo.get('html_url')}"


def format_fork(repo: Dict[str, Any], args: Args) -> str:
    return f"Forked {args['owner']}/{args['repo']} to {repo['full_name']}"


def build_create_repository(args: Args) -> BackendRequest:
    body = {"name": args["name"], "private": args["private"]}
    if "description" in args:
        body["description"] = args["description"]
    return BackendRequest(endpoint="/user/repos", method="POST", body=body)


def build_fork(args: Args) -> BackendRequest:
    body = {"organization": args["organization"]} if "organization" in args else None
    return BackendRequest(endpoint=f"{_repo(args)}/forks", method="POST", body=body)


# =============================================================================
# ISSUES & COMMENTS
# =============================================================================

def format_issue_list(issues: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(
        f"#{i['number']}: {i['title']} ({i['state']}) - {_login(i.get('user'))}"
        for i in issues
    )
    return f"Issues in {args['owner']}/{args['repo']} ({args['state']}):\n\n{lines or 'No issues found'}"


def format_created_issue(issue: Dict[str, Any], args: Args) -> str:
    return f"Created issue #{issue['number']}: {issue['title']}\nURL: {issue.get('html_url')}"


def format_updated_issue(issue: Dict[str, Any], args: Args) -> str:
    return (
        f"Updated issue #{issue['number']} in {args['owner']}/{args['repo']}\n"
        f"State: {issue.get('state')}"
    )


def format_comment_list(comments: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(
        f"{_login(c.get('user'))} at {c.get('created_at')}: {_first_line(c.get('body'))}"
        for c in comments
    )
    return (
        f"Comments on issue #{_scalar(args['issue_number'])} in {args['owner']}/{args['repo']}:"
        f"\n\n{lines or 'No comments'}"
    )


def format_created_comment(comment: Dict[str, Any], args: Args) -> str:
    return (
        f"Comment added to issue #{_scalar(args['issue_number'])} in {args['owner']}/{args['repo']}\n"
        f"URL: {comment.get('html_url')}"
    )


def build_create_issue(args: Args) -> BackendRequest:
    body = {k: args[k] for k in ("title", "body", "labels") if k in args}
    return BackendRequest(endpoint=f"{_repo(args)}/issues", method="POST", body=body)


def build_update_issue(args: Args) -> BackendRequest:
    body = {k: args[k] for k in ("state", "title", "body") if k in args}
    return BackendRequest(
        endpoint=f"{_repo(args)}/issues/{_scalar(args['issue_number'])}",
        method="PATCH",
        body=body
    )


# =============================================================================
# FILES
# =============================================================================

def format_file_content(file_data: Any, args: Args) -> str:
    if not isinstance(file_data, dict) or file_data.get("type") != "file":
        raise ToolExecutionError("Path is not a file")
    try:
        content = base64.b64decode(file_data.get("content") or "").decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise ToolExecutionError(f"File {args['path']} is not valid UTF-8 text")
    return f"File: {args['path']} ({file_data.get('size')} bytes)\n\n{content}"


def format_file_update(result: Dict[str, Any], args: Args) -> str:
    action = "Updated" if "sha" in args else "Created"
    return (
        f"{action} file {args['path']} in {args['owner']}/{args['repo']}\n"
        f"Commit: {(result.get('commit') or {}).get('sha')}"
    )


def build_create_or_update_file(args: Args) -> BackendRequest:
    body = {k: args[k] for k in ("message", "content", "branch", "sha") if k in args}
    return BackendRequest(
        endpoint=f"{_repo(args)}/contents/{quote(args['path'], safe='/')}",
        method="PUT",
        body=body
    )


# =============================================================================
# PULL REQUESTS
# =============================================================================

def format_pull_request_list(pulls: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(
        f"#{pr['number']}: {pr['title']} ({pr['state']}) - {_login(pr.get('user'))}"
        for pr in pulls
    )
    return (
        f"Pull Requests in {args['owner']}/{args['repo']} ({args['state']}):"
        f"\n\n{lines or 'No pull requests found'}"
    )


def format_pull_request(pr: Dict[str, Any], args: Args) -> str:
    return "\n".join([
        f"Pull Request #{pr['number']}: {pr['title']}",
        f"State: {pr.get('state')}",
        f"Author: {_login(pr.get('user'))}",
        f"Created: {pr.get('created_at')}",
        f"URL: {pr.get('html_url')}",
    ])


def format_created_pull_request(pr: Dict[str, Any], args: Args) -> str:
    return f"Created pull request #{pr['number']}: {pr['title']}\nURL: {pr.get('html_url')}"


def format_merge(result: Dict[str, Any], args: Args) -> str:
    return f"Pull Request #{_scalar(args['pull_number'])} merged successfully: {result.get('message')}"


def build_create_pull_request(args: Args) -> BackendRequest:
    body = {k: args[k] for k in ("title", "head", "base", "body") if k in args}
    return BackendRequest(endpoint=f"{_repo(args)}/pulls", method="POST", body=body)


# =============================================================================
# BRANCHES & COMMITS
# =============================================================================

def format_branch_list(branches: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(b["name"] for b in branches)
    return f"Branches in {args['owner']}/{args['repo']}:\n\n{lines or 'No branches found'}"


def format_branch(branch: Dict[str, Any], args: Args) -> str:
    return (
        f"Branch {args['branch']} in {args['owner']}/{args['repo']}\n"
        f"SHA: {(branch.get('commit') or {}).get('sha')}\n"
        f"Protected: {str(branch.get('protected')).lower()}"
    )


def format_created_branch(ref: Dict[str, Any], args: Args) -> str:
    return f"Created branch {args['branch']} in {args['owner']}/{args['repo']}"


def format_commit_list(commits: List[Dict[str, Any]], args: Args) -> str:
    lines = "\n".join(
        f"{c['sha'][:7]}: {_first_line((c.get('commit') or {}).get('message'))} - {_login(c.get('author'))}"
        for c in commits
    )
    return f"Commits in {args['owner']}/{args['repo']}:\n\n{lines or 'No commits found'}"


def format_commit(commit: Dict[str, Any], args: Args) -> str:
    details = commit.get("commit") or {}
    return "\n".join([
        f"Commit {commit['sha']}",
        f"Author: {_login(commit.get('author'))}",
        f"Date: {(details.get('author') or {}).get('date')}",
        f"Message: {details.get('message')}",
    ])


def build_create_branch(args: Args) -> BackendRequest:
    return BackendRequest(
        endpoint=f"{_repo(args)}/git/refs",
        method="POST",
        body={"ref": f"refs/heads/{args['branch']}", "sha": args["sha"]}
    )


# =============================================================================
# SEARCH
# =============================================================================

def format_repository_search(payload: Any, args: Args) -> str:
    lines = "\n".join(
        f"{r['full_name']} - {_or(r.get('description'), 'No description')} "
        f"(Stars: {r.get('stargazers_count')})"
        for r in _items(payload)
    )
    return f'Repository search results for "{args["query"]}":\n\n{lines or "No results"}'


def format_code_search(payload: Any, args: Args) -> str:
    lines = "\n".join(
        f"{(c.get('repository') or {}).get('full_name')}/{c['path']}"
        for c in _items(payload)
    )
    return f'Code search results for "{args["query"]}":\n\n{lines or "No results"}'


def format_issue_search(payload: Any, args: Args) -> str:
    lines = "\n".join(
        f"{'/'.join(i.get('repository_url', '').split('/')[-2:])}#{i['number']}: "
        f"{i['title']} ({i['state']})"
        for i in _items(payload)
    )
    return f'Issue search results for "{args["query"]}":\n\n{lines or "No results"}'


def _search(kind: str):
    def build(args: Args) -> BackendRequest:
        return BackendRequest(endpoint=f"/search/{kind}{_query(q=args['query'], per_page=args['per_page'])}")
    return build


# =============================================================================
# USERS
# =============================================================================

def format_user(user: Dict[str, Any], args: Args) -> str:
    return "\n".join([
        f"User: {_or(user.get('name'), user.get('login'))}",
        f"Email: {_or(user.get('email'), 'N/A')}",
        f"Company: {_or(user.get('company'), 'N/A')}",
        f"Public Repos: {user.get('public_repos')}",
        f"Followers: {user.get('followers')}",
    ])


# =============================================================================
# CATALOG
# =============================================================================

def _get(endpoint: Callable[[Args], str]) -> RequestBuilder:
    """Request builder for a GET whose endpoint is computed from the arguments"""
    return lambda args: BackendRequest(endpoint=endpoint(args))


GITHUB_TOOLS: List[ToolDescriptor] = [
    ToolDescriptor(
        name="github_get_repository",
        description="Get information about a GitHub repository",
        input_schema=_schema(_repo_schema(), ["owner", "repo"]),
        build_request=_get(_repo),
        format_result=format_repository,
    ),
    ToolDescriptor(
        name="github_list_repositories",
        description="List repositories for the authenticated user",
        input_schema=_schema({
            "per_page": {"type": "number", "description": "Number of results per page (max 100)", "default": 30},
            "sort": {"type": "string", "enum": ["created", "updated", "pushed", "full_name"], "default": "updated"},
        }),
        build_request=_get(lambda a: f"/user/repos{_query(per_page=a['per_page'], sort=a['sort'])}"),
        format_result=format_repository_list,
    ),
    ToolDescriptor(
        name="github_list_issues",
        description="List issues for a repository",
        input_schema=_schema(_repo_schema(state=_STATE), ["owner", "repo"]),
        build_request=_get(lambda a: f"{_repo(a)}/issues{_query(state=a['state'])}"),
        format_result=format_issue_list,
    ),
    ToolDescriptor(
        name="github_create_issue",
        description="Create a new issue in a repository",
        input_schema=_schema(_repo_schema(
            title={"type": "string", "description": "Issue title"},
            body={"type": "string", "description": "Issue body"},
            labels={"type": "array", "items": {"type": "string"}, "description": "Issue labels"},
        ), ["owner", "repo", "title"]),
        build_request=build_create_issue,
        format_result=format_created_issue,
    ),
    ToolDescriptor(
        name="github_get_file_content",
        description="Get the content of a file from a repository",
        input_schema=_schema(_repo_schema(
            path={"type": "string", "description": "File path"},
            ref={"type": "string", "description": "Branch/commit/tag reference", "default": "main"},
        ), ["owner", "repo", "path"]),
        build_request=_get(
            lambda a: f"{_repo(a)}/contents/{quote(a['path'], safe='/')}{_query(ref=a['ref'])}"
        ),
        format_result=format_file_content,
    ),
    ToolDescriptor(
        name="github_list_pull_requests",
        description="List pull requests in a repository",
        input_schema=_schema(_repo_schema(state=_STATE, per_page=_PER_PAGE), ["owner", "repo"]),
        build_request=_get(lambda a: f"{_repo(a)}/pulls{_query(state=a['state'], per_page=a['per_page'])}"),
        format_result=format_pull_request_list,
    ),
    ToolDescriptor(
        name="github_get_pull_request",
        description="Get details of a specific pull request",
        input_schema=_schema(_repo_schema(
            pull_number={"type": "number", "description": "Pull request number"},
        ), ["owner", "repo", "pull_number"]),
        build_request=_get(lambda a: f"{_repo(a)}/pulls/{_scalar(a['pull_number'])}"),
        format_result=format_pull_request,
    ),
    ToolDescriptor(
        name="github_create_pull_request",
        description="Create a new pull request",
        input_schema=_schema(_repo_schema(
            title={"type": "string", "description": "Pull request title"},
            head={"type": "string", "description": "Name of the branch with the changes"},
            base={"type": "string", "description": "Name of the branch to merge changes into"},
            body={"type": "string", "description": "Pull request description"},
        ), ["owner", "repo", "title", "head", "base"]),
        build_request=build_create_pull_request,
        format_result=format_created_pull_request,
    ),
    ToolDescriptor(
        name="github_merge_pull_request",
        description="Merge an existing pull request",
        input_schema=_schema(_repo_schema(
            pull_number={"type": "number", "description": "Pull request number"},
            merge_method={"type": "string", "enum": ["merge", "squash", "rebase"], "default": "merge"},
        ), ["owner", "repo", "pull_number"]),
        build_request=lambda a: BackendRequest(
            endpoint=f"{_repo(a)}/pulls/{_scalar(a['pull_number'])}/merge",
            method="PUT",
            body={"merge_method": a["merge_method"]}
        ),
        format_result=format_merge,
    ),
    ToolDescriptor(
        name="github_list_branches",
        description="List branches in a repository",
        input_schema=_schema(_repo_schema(per_page=_PER_PAGE), ["owner", "repo"]),
        build_request=_get(lambda a: f"{_repo(a)}/branches{_query(per_page=a['per_page'])}"),
        format_result=format_branch_list,
    ),
    ToolDescriptor(
        name="github_get_branch",
        description="Get details of a specific branch",
        input_schema=_schema(_repo_schema(
            branch={"type": "string", "description": "Branch name"},
        ), ["owner", "repo", "branch"]),
        build_request=_get(lambda a: f"{_repo(a)}/branches/{_seg(a['branch'])}"),
        format_result=format_branch,
    ),
    ToolDescriptor(
        name="github_create_branch",
        description="Create a new branch in a repository",
        input_schema=_schema(_repo_schema(
            branch={"type": "string", "description": "Name of the new branch"},
            sha={"type": "string", "description": "Commit SHA the new branch points at"},
        ), ["owner", "repo", "branch", "sha"]),
        build_request=build_create_branch,
        format_result=format_created_branch,
    ),
    ToolDescriptor(
        name="github_list_commits",
        description="List commits in a repository",
        input_schema=_schema(_repo_schema(
            sha={"type": "string", "description": "SHA or branch to start from"},
            per_page=_PER_PAGE,
        ), ["owner", "repo"]),
        build_request=_get(
            lambda a: f"{_repo(a)}/commits{_query(sha=a.get('sha'), per_page=a['per_page'])}"
        ),
        format_result=format_commit_list,
    ),
    ToolDescriptor(
        name="github_get_commit",
        description="Get details of a specific commit",
        input_schema=_schema(_repo_schema(
            ref={"type": "string", "description": "Commit SHA"},
        ), ["owner", "repo", "ref"]),
        build_request=_get(lambda a: f"{_repo(a)}/commits/{_seg(a['ref'])}"),
        format_result=format_commit,
    ),
    ToolDescriptor(
        name="github_search_repositories",
        description="Search for repositories",
        input_schema=_schema({"query": _QUERY, "per_page": _PER_PAGE}, ["query"]),
        build_request=_search("repositories"),
        format_result=format_repository_search,
    ),
    ToolDescriptor(
        name="github_search_code",
        description="Search for code in repositories",
        input_schema=_schema({"query": _QUERY, "per_page": _PER_PAGE}, ["query"]),
        build_request=_search("code"),
        format_result=format_code_search,
    ),
    ToolDescriptor(
        name="github_search_issues",
        description="Search for issues across repositories",
        input_schema=_schema({"query": _QUERY, "per_page": _PER_PAGE}, ["query"]),
        build_request=_search("issues"),
        format_result=format_issue_search,
    ),
    ToolDescriptor(
        name="github_list_issue_comments",
        description="List comments on an issue",
        input_schema=_schema(_repo_schema(
            issue_number={"type": "number", "description": "Issue number"},
        ), ["owner", "repo", "issue_number"]),
        build_request=_get(lambda a: f"{_repo(a)}/issues/{_scalar(a['issue_number'])}/comments"),
        format_result=format_comment_list,
    ),
    ToolDescriptor(
        name="github_create_issue_comment",
        description="Add a comment to an issue",
        input_schema=_schema(_repo_schema(
            issue_number={"type": "number", "description": "Issue number"},
            body={"type": "string", "description": "Comment body"},
        ), ["owner", "repo", "issue_number", "body"]),
        build_request=lambda a: BackendRequest(
            endpoint=f"{_repo(a)}/issues/{_scalar(a['issue_number'])}/comments",
            method="POST",
            body={"body": a["body"]}
        ),
        format_result=format_created_comment,
    ),
    ToolDescriptor(
        name="github_update_issue",
        description="Update an existing issue",
        input_schema=_schema(_repo_schema(
            issue_number={"type": "number", "description": "Issue number"},
            state={"type": "string", "enum": ["open", "closed"], "description": "Issue state"},
            title={"type": "string", "description": "Issue title"},
            body={"type": "string", "description": "Issue body"},
        ), ["owner", "repo", "issue_number"]),
        build_request=build_update_issue,
        format_result=format_updated_issue,
    ),
    ToolDescriptor(
        name="github_create_or_update_file",
        description="Create or update a file in a repository",
        input_schema=_schema(_repo_schema(
            path={"type": "string", "description": "File path"},
            message={"type": "string", "description": "Commit message"},
            content={"type": "string", "description": "Base64 encoded file content"},
            branch={"type": "string", "description": "Branch to update", "default": "main"},
            sha={"type": "string", "description": "Blob SHA of the file being replaced (required for updates)"},
        ), ["owner", "repo", "path", "message", "content"]),
        build_request=build_create_or_update_file,
        format_result=format_file_update,
    ),
    ToolDescriptor(
        name="github_create_repository",
        description="Create a new repository",
        input_schema=_schema({
            "name": {"type": "string", "description": "Repository name"},
            "description": {"type": "string", "description": "Repository description"},
            "private": {"type": "boolean", "description": "Make repository private", "default": False},
        }, ["name"]),
        build_request=build_create_repository,
        format_result=format_created_repository,
    ),
    ToolDescriptor(
        name="github_fork_repository",
        description="Fork a repository",
        input_schema=_schema(_repo_schema(
            organization={"type": "string", "description": "Optional organization to fork into"},
        ), ["owner", "repo"]),
        build_request=build_fork,
        format_result=format_fork,
    ),
    ToolDescriptor(
        name="github_get_user",
        description="Get details of a GitHub user",
        input_schema=_schema({
            "username": {"type": "string", "description": "GitHub username"},
        }, ["username"]),
        build_request=_get(lambda a: f"/users/{_seg(a['username'])}"),
        format_result=format_user,
    ),
    ToolDescriptor(
        name="github_get_authenticated_user",
        description="Get details of the user the server is authenticated as",
        input_schema=_schema({}),
        build_request=_get(lambda a: "/user"),
        format_result=format_user,
    ),
]


def build_github_registry() -> ToolRegistry:
    """Registry holding the full GitHub catalog"""
    return ToolRegistry(GITHUB_TOOLS)
