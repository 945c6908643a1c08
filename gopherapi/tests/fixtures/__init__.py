"""Test fixtures for GopherAPI tests.

This module provides sample OpenAPI documents and helpers for resolving
single schemas outside of a full collection run.
"""

# Minimal OpenAPI 3.0 document for basic testing
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'paths': {},
}

# Petstore-like API with models and multiple operations
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {
        'title': 'Petstore API',
        'version': '1.0.0',
        'description': 'A sample Petstore API for testing',
    },
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'summary': 'List all pets',
                'parameters': [
                    {
                        'name': 'limit',
                        'in': 'query',
                        'description': 'Maximum number of pets to return',
                        'required': False,
                        'schema': {'type': 'integer', 'format': 'int32'},
                    },
                ],
                'responses': {
                    '200': {
                        'description': 'A list of pets',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'array',
                                    'items': {'$ref': '#/components/schemas/Pet'},
                                }
                            }
                        },
                    },
                    'default': {
                        'description': 'Unexpected error',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
            'post': {
                'operationId': 'createPet',
                'summary': 'Create a pet',
                'requestBody': {
                    'required': True,
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/NewPet'}
                        }
                    },
                },
                'responses': {
                    '201': {
                        'description': 'Pet created',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    },
                    '400': {
                        'description': 'Invalid input',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
        },
        '/pets/{petId}': {
            'get': {
                'operationId': 'showPetById',
                'summary': 'Info for a specific pet',
                'parameters': [
                    {
                        'name': 'petId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {
                    '200': {
                        'description': 'The pet',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    },
                    '404': {
                        'description': 'Pet not found',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
            'delete': {
                'operationId': 'deletePet',
                'parameters': [
                    {
                        'name': 'petId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {'204': {'description': 'Pet deleted'}},
            },
        },
    },
    'components': {
        'schemas': {
            'Pet': {
                'type': 'object',
                'required': ['id', 'name'],
                'properties': {
                    'id': {'type': 'integer', 'format': 'int64'},
                    'name': {'type': 'string', 'description': 'The pet name'},
                    'tag': {'type': 'string'},
                    'status': {
                        'type': 'string',
                        'enum': ['available', 'pending', 'sold'],
                    },
                },
            },
            'NewPet': {
                'type': 'object',
                'required': ['name'],
                'properties': {
                    'name': {'type': 'string'},
                    'tag': {'type': 'string'},
                },
            },
            'Error': {
                'type': 'object',
                'required': ['code', 'message'],
                'properties': {
                    'code': {'type': 'integer', 'format': 'int32'},
                    'message': {'type': 'string'},
                },
            },
        }
    },
}

# Polymorphic schemas with a discriminator
PETS_UNION_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Union API', 'version': '1.0.0'},
    'paths': {},
    'components': {
        'schemas': {
            'Cat': {
                'type': 'object',
                'required': ['kind'],
                'properties': {
                    'kind': {'type': 'string', 'enum': ['cat']},
                    'indoor': {'type': 'boolean'},
                },
            },
            'Dog': {
                'type': 'object',
                'required': ['kind'],
                'properties': {
                    'kind': {'type': 'string', 'enum': ['dog']},
                    'breed': {'type': 'string'},
                },
            },
            'Bird': {
                'type': 'object',
                'required': ['kind'],
                'properties': {
                    'kind': {'type': 'string', 'enum': ['bird']},
                    'wingspan': {'type': 'number'},
                },
            },
            'Pet': {
                'oneOf': [
                    {'$ref': '#/components/schemas/Cat'},
                    {'$ref': '#/components/schemas/Dog'},
                ],
                'discriminator': {
                    'propertyName': 'kind',
                    'mapping': {
                        'cat': '#/components/schemas/Cat',
                        'dog': '#/components/schemas/Dog',
                    },
                },
            },
        }
    },
}

# Self-referencing and composed schemas
RECURSIVE_SPEC = {
    'openapi': '3.1.0',
    'info': {'title': 'Recursive API', 'version': '1.0.0'},
    'paths': {},
    'components': {
        'schemas': {
            'Node': {
                'type': 'object',
                'properties': {
                    'value': {'type': 'string'},
                    'next': {'$ref': '#/components/schemas/Node'},
                    'children': {
                        'type': 'array',
                        'items': {'$ref': '#/components/schemas/Node'},
                    },
                },
            },
            'Base': {
                'type': 'object',
                'required': ['id'],
                'properties': {'id': {'type': 'integer', 'format': 'int64'}},
            },
            'Named': {
                'allOf': [
                    {'$ref': '#/components/schemas/Base'},
                    {
                        'type': 'object',
                        'required': ['name'],
                        'properties': {'name': {'type': 'string'}},
                    },
                ]
            },
        }
    },
}


def get_spec_as_json(spec: dict) -> str:
    """Convert a spec dictionary to JSON string."""
    import json

    return json.dumps(spec, indent=2)


def get_spec_as_yaml(spec: dict) -> str:
    """Convert a spec dictionary to YAML string."""
    import yaml

    return yaml.dump(spec, default_flow_style=False, sort_keys=False)


def with_schemas(schemas: dict, paths: dict | None = None) -> dict:
    """Build a document holding the given component schemas."""
    return {
        'openapi': '3.0.0',
        'info': {'title': 'Test API', 'version': '1.0.0'},
        'paths': paths or {},
        'components': {'schemas': schemas},
    }


def make_options(spec: dict, path: tuple[str, ...] = (), **generate):
    """Build a fresh resolution context for a document.

    Component schemas are pre-registered, as they are in a full run.
    """
    from gopherapi.codegen.components import pre_register_components
    from gopherapi.codegen.context import ParseOptions
    from gopherapi.codegen.resolver import ReferenceResolver
    from gopherapi.codegen.type_tracker import TypeTracker
    from gopherapi.config import GenerateOptions
    from gopherapi.openapi import parse_document

    document = parse_document(spec)
    options = ParseOptions(
        generate=GenerateOptions(**generate),
        tracker=TypeTracker(),
        resolver=ReferenceResolver(document),
        path=tuple(path),
    )
    pre_register_components(document.components, options)
    return document, options
