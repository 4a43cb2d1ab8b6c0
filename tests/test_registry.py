from pathlib import Path

import pytest

from registry.plugins import (
    KNOWN_MARKERS,
    ManifestRegistry,
    PluginDirectoryRegistry,
    PluginInfo,
    StaticRegistry,
    build_markers,
    plugin_markers,
    read_plugin_headers,
)


def _write_plugin(path: Path, name: str, text_domain: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["<?php", "/**", f" * Plugin Name: {name}", " * Version: 1.0"]
    if text_domain:
        lines.append(f" * Text Domain: {text_domain}")
    lines += [" */", "", "defined( 'ABSPATH' ) || exit;"]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_plugin_markers_cover_folder_file_domain_and_name() -> None:
    plugin = PluginInfo(path="wordpress-seo/wp-seo.php", name="Yoast SEO", text_domain="wordpress-seo")

    assert plugin_markers(plugin) == {"wordpress-seo", "wp-seo", "yoastseo"}


def test_single_file_plugin_has_no_folder_marker() -> None:
    plugin = PluginInfo(path="hello.php", name="Hello Dolly")

    assert plugin_markers(plugin) == {"hello", "hellodolly"}


def test_build_markers_adds_known_markers() -> None:
    markers = build_markers([PluginInfo(path="akismet/akismet.php")])

    assert "akismet" in markers
    assert set(KNOWN_MARKERS) <= markers


def test_build_markers_without_extras() -> None:
    assert build_markers([], extra=()) == frozenset()


def test_read_plugin_headers(tmp_path: Path) -> None:
    plugin_file = tmp_path / "acme.php"
    _write_plugin(plugin_file, "Acme Widgets", "acme-widgets")

    assert read_plugin_headers(plugin_file) == {"name": "Acme Widgets", "text_domain": "acme-widgets"}


def test_read_plugin_headers_strips_comment_close(tmp_path: Path) -> None:
    plugin_file = tmp_path / "tiny.php"
    plugin_file.write_text("<?php\n/* Plugin Name: Tiny Thing */\n", encoding="utf-8")

    assert read_plugin_headers(plugin_file) == {"name": "Tiny Thing"}


def test_directory_registry_discovers_plugins(tmp_path: Path) -> None:
    plugins_dir = tmp_path / "plugins"
    _write_plugin(plugins_dir / "woocommerce" / "woocommerce.php", "WooCommerce", "woocommerce")
    _write_plugin(plugins_dir / "hello.php", "Hello Dolly")
    (plugins_dir / "woocommerce" / "includes.php").write_text("<?php // helpers\n", encoding="utf-8")
    (plugins_dir / "index.php").write_text("<?php // Silence is golden.\n", encoding="utf-8")

    registry = PluginDirectoryRegistry(plugins_dir, extra=())
    plugins = registry.discover()

    assert [p.path for p in plugins] == ["hello.php", "woocommerce/woocommerce.php"]
    assert registry.list_installed_markers() == frozenset({"hello", "hellodolly", "woocommerce"})


def test_directory_registry_rereads_on_each_call(tmp_path: Path) -> None:
    plugins_dir = tmp_path / "plugins"
    plugins_dir.mkdir()
    registry = PluginDirectoryRegistry(plugins_dir, extra=())

    assert registry.list_installed_markers() == frozenset()
    _write_plugin(plugins_dir / "newthing" / "newthing.php", "New Thing")
    assert "newthing" in registry.list_installed_markers()


def test_directory_registry_missing_dir(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        PluginDirectoryRegistry(tmp_path / "nope").list_installed_markers()


def test_manifest_registry(tmp_path: Path) -> None:
    manifest = tmp_path / "plugins.yaml"
    manifest.write_text(
        "plugins:\n"
        "  - path: contact-form-7/wp-contact-form-7.php\n"
        "    name: Contact Form 7\n"
        "    text_domain: contact-form-7\n"
        "  - akismet/akismet.php\n",
        encoding="utf-8",
    )

    markers = ManifestRegistry(manifest, extra=()).list_installed_markers()

    assert markers == frozenset(
        {"contact-form-7", "wp-contact-form-7", "contactform7", "akismet"}
    )


def test_manifest_registry_accepts_plain_list(tmp_path: Path) -> None:
    manifest = tmp_path / "plugins.yaml"
    manifest.write_text("- jetpack/jetpack.php\n", encoding="utf-8")

    assert ManifestRegistry(manifest, extra=()).list_installed_markers() == frozenset({"jetpack"})


def test_manifest_registry_rejects_bad_entry(tmp_path: Path) -> None:
    manifest = tmp_path / "plugins.yaml"
    manifest.write_text("- name: No Path\n", encoding="utf-8")

    with pytest.raises(ValueError):
        ManifestRegistry(manifest).load()


def test_manifest_registry_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ManifestRegistry(tmp_path / "missing.yaml").load()


def test_static_registry_normalizes() -> None:
    registry = StaticRegistry(["WooCommerce", "Yoast SEO", ""])

    assert registry.list_installed_markers() == frozenset({"woocommerce", "yoastseo"})
