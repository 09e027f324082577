# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for the pydantic-backed schema capability."""

from dataclasses import dataclass
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from formtree.schema import select, validate

from models import Address, User


@dataclass
class Point:
    x: int
    y: int


class Shape(BaseModel):
    points: list[Point]
    labels: dict[str, str] = {}
    pair: tuple[int, str] = (0, '')
    sizes: tuple[int, ...] = ()
    weight: Annotated[Optional[float], Field(ge=0)] = None
    tags: list[Annotated[Address, 'tag']] = []


class Cat(BaseModel):
    meow: str


class Dog(BaseModel):
    bark: str


class Pets(BaseModel):
    x: int | list[int] = 0
    pet: Cat | Dog | None = None


class Account(BaseModel):
    user_name: str = Field(alias='userName')
    nick_name: str = Field(default='', validation_alias='nickName')


class TestValidate:
    """Tests for schema.validate."""

    def test_no_schema(self):
        """Test a None schema never reports errors."""
        assert validate(None, {'anything': object()}) == ()

    def test_valid_document(self):
        """Test a valid document gives no errors."""
        assert validate(User, {'name': 'Ann', 'age': 3}) == ()

    def test_missing_fields(self):
        """Test missing required fields are reported with dotted fields."""
        errors = validate(User, {})
        assert [error['field'] for error in errors] == ['data.name', 'data.age']
        assert all(error['type'] == 'missing' for error in errors)
        assert errors[0]['message'] == 'Field required'

    def test_nested_and_indexed_fields(self):
        """Test nested locations are formatted as field strings."""
        errors = validate(User, {
            'name': 'Ann',
            'age': 'old',
            'address': {},
            'emails': ['ok', 5],
        })
        assert [error['field'] for error in errors] == [
            'data.age',
            'data.address.city',
            'data.emails.1',
        ]

    def test_union_member_names_dropped(self):
        """Test union member names do not appear in error fields."""
        errors = validate(Pets, {'x': 'abc'})
        assert [error['field'] for error in errors] == ['data.x', 'data.x']

    def test_union_of_models(self):
        """Test errors inside a union member model point at its fields."""
        errors = validate(Pets, {'pet': {}})
        assert [error['field'] for error in errors] == ['data.pet.meow', 'data.pet.bark']

    def test_aliased_field(self):
        """Test errors on aliased fields use the alias."""
        errors = validate(Account, {})
        assert [error['field'] for error in errors] == ['data.userName']

    def test_error_records_are_dicts(self):
        """Test records carry field, message and type."""
        (error,) = validate(User, {'name': 'Ann'})
        assert set(error) == {'field', 'message', 'type'}


class TestSelect:
    """Tests for schema.select."""

    def test_empty_path(self):
        """Test the empty key path returns the schema itself."""
        assert select(User, ()) is User

    def test_model_field(self):
        """Test a model field annotation is returned."""
        assert select(User, ('name',)) is str

    def test_optional_model_unwrapped(self):
        """Test Optional wrappers are stripped while walking."""
        assert select(User, ('address',)) == Optional[Address]
        assert select(User, ('address', 'city')) is str

    def test_list_item(self):
        """Test list element types are used for index segments."""
        assert select(User, ('emails', 0)) is str

    def test_dataclass_field(self):
        """Test dataclass fields are resolved."""
        assert select(Shape, ('points', 2, 'x')) is int

    def test_mapping_value(self):
        """Test mapping value types are used for any key."""
        assert select(Shape, ('labels', 'en')) is str

    def test_tuples(self):
        """Test fixed and variadic tuples."""
        assert select(Shape, ('pair', 1)) is str
        assert select(Shape, ('pair', 2)) is None
        assert select(Shape, ('sizes', 7)) is int

    def test_annotated_unwrapped(self):
        """Test Annotated metadata is stripped while walking."""
        assert select(Shape, ('weight',)) == Optional[float]
        assert select(Shape, ('tags', 0, 'city')) is str

    def test_alias(self):
        """Test fields resolve by alias as well as by attribute name."""
        assert select(Account, ('userName',)) is str
        assert select(Account, ('user_name',)) is str
        assert select(Account, ('nickName',)) is str

    def test_union_field(self):
        """Test a union field keeps its union annotation."""
        assert select(Pets, ('x',)) == (int | list[int])

    def test_unknown_paths(self):
        """Test leaving the schema gives None."""
        assert select(User, ('missing',)) is None
        assert select(User, ('name', 'x')) is None
        assert select(User, ('emails', 'x')) is None
        assert select(None, ('a',)) is None
