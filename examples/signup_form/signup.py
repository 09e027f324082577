# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Signup form - Example of FormTree form state.

A didactic example showing a form holder that stores the latest root
handed to on_change, field-level and sub-form error queries, a
server-side error attached as an external error, and a batched edit.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from formtree import Root, create, suppress_update


class Address(BaseModel):
    street: str
    city: str


class Signup(BaseModel):
    username: str = Field(min_length=3)
    email: str
    address: Address


class SignupForm:
    """Holds the current root and replaces it on every change.

    Example:
        >>> form = SignupForm()
        >>> _ = form.value.select('username').update('ann')
        >>> form.value.document['username']
        'ann'
    """

    def __init__(self):
        self.changes = 0
        self.value = create(schema=Signup, on_change=self._on_change)

    def _on_change(self, root: Root, key_path: tuple) -> None:
        self.commit(root)

    def commit(self, root: Root) -> None:
        """Store root as the current form state."""
        self.changes += 1
        self.value = root

    def invalid_fields(self) -> list[str]:
        """Return the fields currently reported as invalid."""
        return [error['field'] for error in self.value.complete_error_list]


def main():
    form = SignupForm()
    print("Empty form:", form.invalid_fields())

    form.value.select('username').update('an')
    print("username errors:", [e['message'] for e in form.value.select('username').error_list])

    # Fill several fields with a single notification
    def fill():
        value = form.value.select('username').update('ann')
        value = value.root.select('email').update('ann@example.org')
        value = value.root.select('address').update({'street': 'Via Roma 1'})
        return value.root

    root = suppress_update(fill)
    form.commit(root)
    print("After batch:", form.invalid_fields())
    print("address is invalid:", bool(form.value.select('address').complete_error_list))

    form.value.select('address.city').update('Milano')

    # Server says the username is taken
    form.value.select('username').add_error({'message': 'Username already taken'})
    error = form.value.select('username').error_list[0]
    print("Server error:", error)

    form.value.remove_error(error)
    print("Valid:", not form.value.complete_error_list, "changes:", form.changes)


if __name__ == '__main__':
    main()
