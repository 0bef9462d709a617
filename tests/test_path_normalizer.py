import pytest

from appforge.core.path_normalizer import normalize_files, normalize_path


def test_scenario_e_denied_and_legacy_paths():
    out = normalize_files({
        "/next.config.js": "module.exports = {}",
        "/app/page.tsx": "export default function Page() {}",
        "/App.tsx": "export default function App() {}",
    })
    assert out == {"/src/App.tsx": "export default function App() {}"}


@pytest.mark.parametrize("path", ["/next.config.ts", "/next.config.js", "/app/page.tsx", "/app/layout.tsx", "app/layout.tsx", "./next.config.js"])
def test_denylist_is_dropped(path):
    assert normalize_path(path) is None


@pytest.mark.parametrize("path,expected", [
    ("/package.json", "/package.json"),
    ("/vite.config.ts", "/vite.config.ts"),
    ("/index.html", "/index.html"),
    ("package.json", "/package.json"),
    ("App.tsx", "/src/App.tsx"),
    ("/src/components/Button.tsx", "/src/components/Button.tsx"),
    ("/public/logo.svg", "/public/logo.svg"),
    ("/tailwind.config.js", "/tailwind.config.js"),
    ("src/hooks/useThing.ts", "/src/hooks/useThing.ts"),
    ("/components/Card.tsx", "/src/components/Card.tsx"),
    ("utils.ts", "/src/utils.ts"),
    ("/styles.css", "/src/styles.css"),
    ("/README.md", "/README.md"),
    ("notes.txt", "notes.txt"),
    ("components\\Nav.jsx", "/src/components/Nav.jsx"),
    ("./src/App.tsx", "/src/App.tsx"),
    ("./App.tsx", "/src/App.tsx"),
    ("/src//components/./A.tsx", "/src/components/A.tsx"),
    ("//src/main.tsx", "/src/main.tsx"),
    ("./package.json", "/package.json"),
])
def test_path_rules(path, expected):
    assert normalize_path(path) == expected


@pytest.mark.parametrize("path", ["", "   ", "../secrets.ts", "/src/../../etc/passwd", None, ".", "./", "/"])
def test_unsafe_paths_are_dropped(path):
    assert normalize_path(path) is None


def test_collisions_last_write_wins():
    assert normalize_files({"/App.tsx": "a", "/src/App.tsx": "b"}) == {"/src/App.tsx": "b"}
    assert normalize_files({"/src/App.tsx": "b", "App.tsx": "a"}) == {"/src/App.tsx": "a"}


def test_normalize_is_idempotent():
    files = {
        "/App.tsx": "1",
        "App.tsx": "2",
        "/components/Card.tsx": "3",
        "src/main.tsx": "4",
        "index.css": "5",
        "/next.config.js": "6",
        "tailwind.config.js": "7",
        "/README.md": "8",
        "public/favicon.ico": "9",
        "package.json": "10",
        "lib\\api.ts": "11",
        "docs/guide.md": "12",
        "./src/pages/Home.tsx": "13",
        "/src//components/./Nav.tsx": "14",
        "./styles.css": "15",
    }
    once = normalize_files(files)
    assert normalize_files(once) == once


def test_empty_input():
    assert normalize_files({}) == {}
    assert normalize_files(None) == {}
