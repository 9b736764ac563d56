import pytest
import sys
from pathlib import Path

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from keelson.cli.formatter import OutputFormatter

SITE_CONFIG = """
site:
  name: blog
  framework: drupal
  version: "9"
config:
  mail:
    sender: ops@example.com
  retries: 3
databases:
  default:
    url: sqlite:///./site.db
aliases:
  prodserver:
    root: {root}
    host: prod.example.com
    aliases: [prod]
  staging:
    host: staging.example.com
"""


@pytest.fixture(autouse=True)
def cache_dir(tmp_path, monkeypatch):
    """
    Points the Keelson cache (and with it the shell history) at a temporary
    directory and resets the verbose flag a previous boot may have set.
    """
    cache = tmp_path / "cache"
    monkeypatch.setenv("KEELSON_CACHE_DIR", str(cache))
    monkeypatch.setattr(OutputFormatter, "verbose", False)
    return cache


@pytest.fixture
def site_root(tmp_path):
    """
    A site directory with a keelson.yaml declaring site identity, config,
    a SQLite database and two aliases (one pointing back at this root).
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "keelson.yaml").write_text(SITE_CONFIG.format(root=root))
    return root


@pytest.fixture
def outside_dir(tmp_path, monkeypatch):
    """A working directory that is not inside any site."""
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    monkeypatch.chdir(outside)
    return outside
