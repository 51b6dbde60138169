import logging
import os
from typing import List, Optional

from wildignore.ignorefile import IgnoreRule, IgnoreStack, PatternList
from wildignore.models import Case, FileNode, NodeType

GITIGNORE = ".gitignore"
INFO_EXCLUDE = os.path.join(".git", "info", "exclude")


def _is_dir(path: str) -> bool:
    # git records a symlink as a plain entry, even when it points at a directory
    return os.path.isdir(path) and not os.path.islink(path)


class IgnoreWalker:
    """
    Recursively collects FileNode objects under a root, applying every
    .gitignore found on the way plus .git/info/exclude and an optional
    global excludes file.

    Ignored entries are pruned unless `include_ignored` is set, in which case
    they are kept and marked. Ignored directories are never entered, so
    nothing below them can be re-included.
    """
    def __init__(self, ignore_hidden: bool = False, case: Case = Case.SENSITIVE,
                 include_ignored: bool = False, exclude_file: Optional[str] = None):
        self.ignore_hidden = ignore_hidden
        self.case = case
        self.include_ignored = include_ignored
        self.exclude_file = exclude_file

    def base_stack(self, root_path: str) -> IgnoreStack:
        """Stack holding the global excludes file and .git/info/exclude."""
        stack = IgnoreStack(case=self.case)
        if self.exclude_file:
            stack = stack.push(PatternList.from_file(self.exclude_file))
        stack = stack.push(PatternList.from_file(os.path.join(root_path, INFO_EXCLUDE),
                                                 source=INFO_EXCLUDE.replace(os.sep, "/")))
        return stack

    def _push_dir(self, stack: IgnoreStack, dir_path: str, rel_dir: str) -> IgnoreStack:
        gitignore = os.path.join(dir_path, GITIGNORE)
        if not os.path.isfile(gitignore):
            return stack
        source = f"{rel_dir}/{GITIGNORE}" if rel_dir else GITIGNORE
        logging.debug(f"Using ignore file {gitignore}")
        return stack.push(PatternList.from_file(gitignore, base=rel_dir, source=source))

    def walk(self, root_path: str) -> FileNode:
        stack = self._push_dir(self.base_stack(root_path), root_path, "")
        return self._walk(root_path, "", stack)

    def _walk(self, path: str, rel_path: str, stack: IgnoreStack) -> FileNode:
        # Use "." for the root node name to match standard tree output
        name = os.path.basename(path) if rel_path else "."
        children: List[FileNode] = []
        try:
            entries = sorted(os.listdir(path))
        except PermissionError:
            logging.warning(f"Permission denied while listing {path}")
            entries = []

        for entry in entries:
            if entry == ".git" or (self.ignore_hidden and entry.startswith('.')):
                continue
            child_path = os.path.join(path, entry)
            child_rel = f"{rel_path}/{entry}" if rel_path else entry
            is_dir = _is_dir(child_path)
            rule = stack.match(child_rel, is_dir)
            ignored = rule is not None and not rule.pattern.is_negative

            if ignored:
                logging.debug(f"{child_rel} ignored by {rule.describe()}")
                if not self.include_ignored:
                    continue
                children.append(FileNode(
                    name=entry,
                    path=child_path,
                    rel_path=child_rel,
                    node_type=NodeType.DIRECTORY if is_dir else NodeType.FILE,
                    is_ignored=True,
                    ignored_by=rule.describe(),
                    children=[] if is_dir else None,
                ))
            elif is_dir:
                children.append(self._walk(child_path, child_rel, self._push_dir(stack, child_path, child_rel)))
            else:
                children.append(FileNode(name=entry, path=child_path, rel_path=child_rel,
                                         node_type=NodeType.FILE))

        return FileNode(
            name=name,
            path=path,
            rel_path=rel_path,
            node_type=NodeType.DIRECTORY,
            children=children,
        )

    def check(self, root_path: str, rel_path: str, is_dir: Optional[bool] = None) -> Optional[IgnoreRule]:
        """
        Return the rule deciding `rel_path` (relative to `root_path`), like
        `git check-ignore`. Leading directories are checked first: once one of
        them is excluded it decides for everything below it. A negated rule is
        returned as-is so callers can tell "re-included" from "no rule".
        """
        parts = [p for p in rel_path.replace(os.sep, "/").split("/") if p and p != "."]
        if not parts:
            return None
        if is_dir is None:
            is_dir = _is_dir(os.path.join(root_path, *parts))

        stack = self._push_dir(self.base_stack(root_path), root_path, "")
        for depth in range(1, len(parts)):
            parent = "/".join(parts[:depth])
            rule = stack.match(parent, True)
            if rule is not None and not rule.pattern.is_negative:
                return rule
            stack = self._push_dir(stack, os.path.join(root_path, *parts[:depth]), parent)
        return stack.match("/".join(parts), is_dir)
