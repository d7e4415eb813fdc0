#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Interning of heavy objects (operators, coefficients) into integer labels.

The finite-state machine works over small integers instead of tensors. A
`LabelConvertor` hands out those integers and keeps the reverse mapping so
the labels can be realized back into concrete values when the MPO tensors
are assembled.
"""

import numbers


class LabelConvertor:
    """A bidirectional mapping between objects and dense integer labels.

    Labels are handed out in order of first appearance, starting at 0, so the
    reverse mapping is a plain list indexed by label. Objects are compared by
    value with ``==``; they do not need to be hashable.

    Attributes:
        labels_objs (list): The objects seen so far; position is the label.
    """

    def __init__(self, first_obj=None):
        """Initializes the convertor.

        Args:
            first_obj (optional): An object to reserve label 0 for. The
                coefficient convertor reserves label 0 for the number 1.
        """
        self.labels_objs = []
        if first_obj is not None:
            self.convert(first_obj)

    def convert(self, obj) -> int:
        """Returns the label of `obj`, assigning a new one if it is unseen.

        Args:
            obj: The object to intern.

        Returns:
            int: The label of an object equal to `obj`.
        """
        for label, known_obj in enumerate(self.labels_objs):
            if _same_value(known_obj, obj):
                return label
        # Stored by value; the caller may keep mutating its own object.
        copy = getattr(obj, "copy", None)
        self.labels_objs.append(copy() if callable(copy) else obj)
        return len(self.labels_objs) - 1

    def get_label_obj_mapping(self) -> list:
        """Returns the dense label -> object mapping as a list."""
        return list(self.labels_objs)

    def __len__(self):
        return len(self.labels_objs)


def _same_value(a, b) -> bool:
    # Scalars of different Python types (1 and 1.0) intern to one label;
    # tensors and scalars never compare equal.
    if type(a) is not type(b) and not (_is_scalar(a) and _is_scalar(b)):
        return False
    return bool(a == b)


def _is_scalar(obj) -> bool:
    return isinstance(obj, numbers.Number)
