import os

import pytest


@pytest.fixture
def app_tree(tmp_path):
    """A small PHP-style application tree with a symlink and a shared uploads dir."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "app.php").write_text("<?php echo 'hello';\n")
    (src / "config").mkdir()
    (src / "config" / "app.ini").write_text("debug=0\n")
    (src / "bin").mkdir()
    script = src / "bin" / "console"
    script.write_text("#!/bin/sh\necho console\n")
    os.chmod(script, 0o750)
    (src / "uploads").mkdir()
    (src / "uploads" / "avatar.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    os.symlink(src / "app.php", src / "index.php")
    return src

