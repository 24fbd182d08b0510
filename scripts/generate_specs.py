#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under memegen/specs/:
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import yaml


ROOT = Path(__file__).resolve().parents[1]
PKG = ROOT / "memegen"
SPECS = PKG / "specs"
SCHEMAS_DIR = SPECS / "schemas"

sys.path.insert(0, str(ROOT))

from memegen.specs.models import SCHEMA_MODELS, CaptionRequest  # noqa: E402


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def generate_model_schemas() -> None:
    for filename, model in SCHEMA_MODELS.items():
        schema = model.model_json_schema()
        write_json_yaml(schema, SCHEMAS_DIR / filename)


def _query_param(name: str, description: str, required: bool = False) -> dict:
    return {
        "in": "query",
        "name": name,
        "description": description,
        "schema": {"type": "string"},
        "required": required,
    }


def build_openapi() -> dict:
    components = {
        "schemas": {
            "CaptionRequest": CaptionRequest.model_json_schema(),
        }
    }
    parameters = [
        _query_param("source", "URL of the PNG, JPEG or GIF source image", required=True),
        _query_param("top", "Caption drawn near the top edge"),
        _query_param("bottom", "Caption drawn near the bottom edge"),
        _query_param("white", "Any non-empty value selects white text; black otherwise"),
    ]
    responses = {
        "200": {
            "description": "Captioned image; X-Cache tells whether it was replayed",
            "headers": {
                "X-Cache": {"schema": {"type": "string", "enum": ["HIT", "MISS"]}}
            },
            "content": {
                "image/png": {"schema": {"type": "string", "format": "binary"}}
            },
        },
        "400": {
            "description": "Invalid URL, invalid or unsupported image, or image too large",
            "content": {
                "text/plain": {"schema": {"type": "string"}}
            },
        },
    }

    spec = {
        "openapi": "3.0.3",
        "info": {
            "title": "Memegen Functions API",
            "version": "0.1.0",
            "description": "Captions a source image with top and bottom text and caches the result.",
        },
        "servers": [
            {"url": "http://localhost:7071/api", "description": "Local Functions host"}
        ],
        "paths": {
            "/caption": {
                "get": {
                    "summary": "Render (or replay) a captioned image",
                    "operationId": "captionImage",
                    "parameters": parameters,
                    "responses": responses,
                },
                "post": {
                    "summary": "Render (or replay) a captioned image from form fields",
                    "operationId": "captionImageForm",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/x-www-form-urlencoded": {
                                "schema": {"$ref": "#/components/schemas/CaptionRequest"}
                            }
                        },
                    },
                    "responses": responses,
                },
            }
        },
        "components": components,
    }
    return spec


def generate_openapi() -> None:
    spec = build_openapi()
    write_json_yaml(spec, SPECS / "openapi.json")


def main() -> None:
    generate_model_schemas()
    generate_openapi()
    print("Specs generated under memegen/specs/")


if __name__ == "__main__":
    main()
