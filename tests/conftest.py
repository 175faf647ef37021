"""
Pytest fixtures for crdtokcl tests.
"""

import json
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

KCL_OUTPUT_TEMPLATE = """\
\"\"\"
This file was generated by the KCL auto-gen tool. DO NOT EDIT.
Editing this file might prove futile when you re-run the KCL auto-gen generate command.
\"\"\"
import regex

regex_match = regex.match

schema {kind}:
    apiVersion: str = "example.io/{version}"
    kind: str = "{kind}"
"""


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_crd_v1():
    """Sample CRD in v1 format."""
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": "widgets.example.io"},
        "spec": {
            "group": "example.io",
            "names": {"kind": "Widget", "plural": "widgets", "singular": "widget"},
            "scope": "Namespaced",
            "versions": [
                {
                    "name": "v1",
                    "served": True,
                    "storage": True,
                    "schema": {
                        "openAPIV3Schema": {
                            "type": "object",
                            "properties": {
                                "spec": {
                                    "type": "object",
                                    "properties": {"size": {"type": "integer", "minimum": 1}},
                                },
                            },
                        }
                    },
                },
            ],
        },
    }


@pytest.fixture
def sample_crd_text(sample_crd_v1):
    """Sample CRD serialized as YAML bytes, as served by a raw URL."""
    return yaml.dump(sample_crd_v1).encode()


@pytest.fixture
def fake_converter():
    """
    Converter stand-in that records calls and writes a KCL file shaped
    like `kcl import` output, including the regex_match declaration.
    """
    calls = []

    def convert(input_path, output_path, **kwargs):
        calls.append((Path(input_path), Path(output_path)))
        kind = output_path.stem.split("_")[0].capitalize()
        version = output_path.parent.name
        output_path.write_text(KCL_OUTPUT_TEMPLATE.format(kind=kind, version=version))

    convert.calls = calls
    return convert


@pytest.fixture
def fake_download(sample_crd_text):
    """Replacement for download.download_file that writes the sample CRD."""
    urls = []

    def download(url, dest_path):
        urls.append(url)
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(sample_crd_text)
        return dest_path

    download.urls = urls
    return download


@pytest.fixture
def sample_config():
    """Job configuration in the format written by the discovery flow."""
    return {
        "moduleName": "example",
        "crds": {
            "widget_v1": "https://raw.githubusercontent.com/example/repo/main/crds/widget_v1.yaml",
            "gadget_v1beta1": "https://raw.githubusercontent.com/example/repo/main/crds/gadget_v1beta1.yaml",
            "plainresource": "https://raw.githubusercontent.com/example/repo/main/crds/plainresource.yaml",
        },
    }


@pytest.fixture
def sample_config_file(temp_dir, sample_config):
    """Write the sample config to disk and return its path."""
    config_dir = temp_dir / "config"
    config_dir.mkdir()
    config_file = config_dir / "example.json"
    config_file.write_text(json.dumps(sample_config, indent=4))
    return config_file


def make_tree_page(items: list[dict]) -> str:
    """Render a minimal GitHub tree page with the embedded listing data."""
    payload = {"payload": {"tree": {"items": items}}}
    return f"""<!DOCTYPE html>
<html>
<head><title>crds at main</title></head>
<body>
<script type="application/json" data-target="react-app.embeddedData">{json.dumps(payload)}</script>
</body>
</html>
"""


@pytest.fixture
def github_tree_page():
    """GitHub directory page listing two CRDs and a README."""
    return make_tree_page(
        [
            {"name": "widget_v1.yaml", "path": "crds/widget_v1.yaml", "contentType": "file"},
            {"name": "gadget_v1beta1.yaml", "path": "crds/gadget_v1beta1.yaml", "contentType": "file"},
            {"name": "README.md", "path": "crds/README.md", "contentType": "file"},
        ]
    )


@pytest.fixture
def mock_page_response(github_tree_page):
    """A successful response for the tree page."""
    response = MagicMock()
    response.status_code = 200
    response.reason = "OK"
    response.text = github_tree_page
    return response
