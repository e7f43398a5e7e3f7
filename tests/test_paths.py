from pathlib import Path

from srcset.paths import (
    ensure_parent_dirs,
    resolve_extension,
    sidecar_path,
    url_prefix,
    variant_path,
    width_label,
    write_text_atomic,
)


def test_flat_layout_drops_source_subdirectories(tmp_path):
    src = tmp_path / "in" / "album" / "photo.jpg"
    dst = variant_path(tmp_path / "out", tmp_path / "in", src, width_label(320), "jpg", nested=False)
    assert dst == tmp_path / "out" / "photo" / "320w.jpg"


def test_nested_layout_keeps_source_subdirectories(tmp_path):
    src = tmp_path / "in" / "album" / "photo.png"
    dst = variant_path(tmp_path / "out", tmp_path / "in", src, "legacy", "png", nested=True)
    assert dst == tmp_path / "out" / "album" / "photo" / "legacy.png"


def test_nested_layout_at_input_root(tmp_path):
    src = tmp_path / "in" / "photo.png"
    dst = variant_path(tmp_path / "out", tmp_path / "in", src, "legacy", "png", nested=True)
    assert dst == tmp_path / "out" / "photo" / "legacy.png"


def test_sidecar_sits_beside_variants(tmp_path):
    src = tmp_path / "in" / "a" / "b" / "shot.jpg"
    assert sidecar_path(tmp_path / "out", tmp_path / "in", src, nested=True) == (
        tmp_path / "out" / "a" / "b" / "shot" / "srcset.txt"
    )


def test_flat_layout_collides_on_shared_stem(tmp_path):
    one = variant_path(tmp_path, tmp_path / "in", tmp_path / "in" / "x" / "p.jpg", "320w", "jpg", False)
    two = variant_path(tmp_path, tmp_path / "in", tmp_path / "in" / "y" / "p.jpg", "320w", "jpg", False)
    assert one == two


def test_resolve_extension():
    assert resolve_extension(Path("a/photo.JPG"), "") == "JPG"
    assert resolve_extension(Path("a/photo.jpg"), "webp") == "webp"
    assert resolve_extension(Path("a/photo.jpg"), ".png") == "png"


def test_url_prefix_mirrors_output_layout(tmp_path):
    root = tmp_path / "in"
    src = root / "album" / "2021" / "photo.jpg"
    for nested in (False, True):
        out_dir = variant_path(tmp_path / "out", root, src, "320w", "jpg", nested).parent
        rel = out_dir.relative_to(tmp_path / "out").as_posix()
        assert url_prefix("/static/img", root, src, nested) == "/static/img/" + rel
        assert url_prefix("", root, src, nested) == rel


def test_url_prefix_trailing_slash():
    assert url_prefix("https://cdn.example.com/", Path("in"), Path("in/photo.jpg"), False) == (
        "https://cdn.example.com/photo"
    )


def test_ensure_parent_dirs_is_idempotent(tmp_path):
    target = tmp_path / "deep" / "er" / "file.png"
    ensure_parent_dirs(target)
    ensure_parent_dirs(target)
    assert target.parent.is_dir()


def test_write_text_atomic_replaces_content(tmp_path):
    target = tmp_path / "srcset.txt"
    write_text_atomic(target, "old")
    write_text_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "new"
    assert not (tmp_path / "srcset.txt.tmp").exists()
