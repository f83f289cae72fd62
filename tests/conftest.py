"""Pytest configuration and fixtures."""


import pytest

SAMPLE_PACKAGE_JSON = """{
  "name": "@acme/widgets",
  "version": "1.4.0-beta.2",
  "description": "Widgets for everyone",
  "customField": {
    "x": 1
  },
  "license": "MIT",
  "author": "Jane Doe <jane@example.com> (https://jane.dev)",
  "repository": {
    "type": "git",
    "url": "https://github.com/acme/widgets.git",
    "directory": "packages/widgets"
  },
  "bin": "./bin/widgets.js",
  "exports": {
    ".": {
      "import": "./dist/index.mjs",
      "require": "./dist/index.cjs"
    },
    "./package.json": "./package.json"
  },
  "scripts": {
    "build": "tsc -p .",
    "test": "vitest run"
  },
  "os": [
    "linux",
    "darwin"
  ],
  "workspaces": [
    "packages/*"
  ],
  "dependencies": {
    "lodash": "^4.17.21",
    "left-pad": "npm:@acme/left-pad@^2.0.0",
    "utils": "workspace:^",
    "widgets-core": "github:acme/widgets-core#main"
  },
  "devDependencies": {
    "lodash": "4.17.21",
    "vitest": "latest"
  },
  "x-tooling": [
    "keep",
    "me"
  ]
}
"""


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return SAMPLE_PACKAGE_JSON


@pytest.fixture
def manifest_file(tmp_path):
    """Create a temporary package.json for testing."""
    manifest = tmp_path / "package.json"
    manifest.write_text(SAMPLE_PACKAGE_JSON)
    return manifest
