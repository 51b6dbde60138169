from typing import List

from wildignore.models import FileNode


class Renderer:
    """
    Renderer takes a list of FileNode objects produced by the walker and produces:
      - render_tree(): the directory/file hierarchy in ASCII form, ignored entries marked
      - render_paths(): relative paths that are (or are not) ignored, one per line
    """
    def __init__(self, nodes: List[FileNode]):
        self.nodes = nodes

    def render_tree(self) -> str:
        """Return an ASCII tree of the FileNode hierarchy."""
        lines: List[str] = []
        for root in self.nodes:
            self._format_node(root, lines, lead="", indent="")
        return "\n".join(lines)

    def _format_node(self, node: FileNode, lines: List[str], lead: str, indent: str):
        """
        Append `node` to `lines` behind `lead`, then its children. `indent`
        is what the children's own connectors are drawn after.
        """
        suffix = "/" if node.node_type == "directory" else ""
        marker = f" [ignored: {node.ignored_by}]" if node.is_ignored else ""
        lines.append(f"{lead}{node.name}{suffix}{marker}")

        children = node.children or []
        for index, child in enumerate(children):
            if index == len(children) - 1:
                branch, pad = "└── ", "    "
            else:
                branch, pad = "├── ", "│   "
            self._format_node(child, lines, indent + branch, indent + pad)

    def render_paths(self, ignored: bool = True) -> str:
        """Relative paths of entries whose ignored state equals `ignored`; directories end in '/'."""
        return "\n".join(self._collect_paths(self.nodes, ignored))

    def _collect_paths(self, nodes: List[FileNode], ignored: bool) -> List[str]:
        paths = []
        for node in nodes:
            if node.rel_path and node.is_ignored == ignored:
                suffix = "/" if node.node_type == "directory" else ""
                paths.append(node.rel_path + suffix)
            if node.children:
                paths.extend(self._collect_paths(node.children, ignored))
        return paths
