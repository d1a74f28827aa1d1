import json

import pytest

EXT_PHP = """<?php
namespace acme\\demo;

class ext extends \\phpbb\\extension\\base
{
}
"""


def write_tree(root, files):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def php_event(*names):
    lines = ["<?php", "$vars = array('data');"]
    for name in names:
        lines.append(f"extract($phpbb_dispatcher->trigger_event('{name}', compact($vars)));")
    return "\n".join(lines) + "\n"


@pytest.fixture
def extension(tmp_path):
    """Build an extension below ``tmp_path/acme/demo`` and return the root."""

    def build(files=None, namespace="acme/demo"):
        base_dir = tmp_path / "acme" / "demo"
        tree = {
            "ext.php": EXT_PHP,
            "composer.json": json.dumps({"name": namespace, "type": "phpbb-extension"}),
            "license.txt": "GNU General Public License v2\n",
        }
        tree.update(files or {})
        write_tree(base_dir, tree)
        return tmp_path

    return build
