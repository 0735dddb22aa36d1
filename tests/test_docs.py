from pathlib import Path

from terraform_provider_juicefs.docs import render_docs, write_docs


def test_render_docs_pages(provider):
    pages = render_docs(provider)
    assert set(pages) == {Path("resources/format.md"), Path("data-sources/version.md")}

    resource_page = pages[Path("resources/format.md")]
    assert "# juicefs_format (Resource)" in resource_page
    assert "### Required" in resource_page
    assert "- `metadata_uri` (String) Metadata engine to use" in resource_page
    assert "- `triggers` (Map of String, forces replacement)" in resource_page
    assert "- `additional_params` (List of String)" in resource_page
    assert "### Read-Only" in resource_page

    version_page = pages[Path("data-sources/version.md")]
    assert 'data "juicefs_version" "current" {}' in version_page
    assert "- `version` (String) Version of installed JuiceFS" in version_page
    assert "### Required" not in version_page


def test_write_docs(provider, tmp_path):
    written = write_docs(render_docs(provider), tmp_path)
    assert len(written) == 2
    assert all(path.read_text(encoding="utf-8") for path in written)
