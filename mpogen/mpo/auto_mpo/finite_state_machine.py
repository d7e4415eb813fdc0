#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Finite-State Machines for automatic MPO generation.

This module defines the classes and logic for compressing a sum of operator
strings into a layered Finite-State Machine (FSM). Every term is a path from
the head node to the tail node, one edge per lattice site, and the graph is
compressed by merging the new path into existing ones from both ends. The
edges carry label-level operator representations (`OpRepr`), so the machine
never touches the actual tensors.

The compressed machine is handed out as one `SparOpReprMat` per site, which
is the label skeleton of the MPO tensor on that site.
"""

import logging
from typing import List, Sequence

from .op_repr import OpRepr, SparOpReprMat

logger = logging.getLogger(__name__)


class FsmEdge:
    """Represents a directed edge in the Finite-State Machine graph.

    An edge connects two `FsmNode` objects and carries the operator
    representation which, once realized, becomes one block of the MPO.

    Attributes:
        op_repr (OpRepr): The operator (with coefficient) on this edge.
        node_from (FsmNode): The node from which this edge originates.
        node_to (FsmNode): The node to which this edge points.
        out_idx (int): The index of this edge in the outgoing edges list of
            `node_from`.
        in_idx (int): The index of this edge in the incoming edges list of
            `node_to`.
    """

    def __init__(self, op_repr, node_from, node_to):
        self.op_repr = op_repr

        # Defines the direction: (node_from) --edge--> (node_to)
        self.node_from = node_from
        self.node_to = node_to

        # This edge is the `out_idx`-th outgoing edge of `node_from` and the
        # `in_idx`-th incoming edge of `node_to`.
        self.out_idx = node_from.out_degree()
        self.in_idx = node_to.in_degree()

    def is_equal(self, other):
        """Checks if another edge carries the same operator representation.

        Used to identify edges that can be merged during the FSM compression.
        """
        return self.op_repr == other.op_repr


class FsmNode:
    """Represents a node (or state) in the Finite-State Machine.

    Layer ``i`` holds the states living on the virtual bond to the left of
    site ``i``.

    Attributes:
        layer_idx (int): The index of the layer this node belongs to.
        bond_idx (int): The index of this node within its layer. This is the
            row/column index of the node in the MPO tensors.
        list_edge_out (list[FsmEdge]): Edges originating from this node.
        list_edge_in (list[FsmEdge]): Edges pointing to this node.
    """

    def __init__(self, layer_idx, bond_idx):
        self.layer_idx = layer_idx
        self.bond_idx = bond_idx
        self.list_edge_out = []
        self.list_edge_in = []

    def __eq__(self, other):
        """Checks if two nodes are identical based on their location."""
        return (self.layer_idx == other.layer_idx) and (self.bond_idx == other.bond_idx)

    def out_degree(self):
        return len(self.list_edge_out)

    def in_degree(self):
        return len(self.list_edge_in)

    def new_edge_out(self, next_node, op_repr):
        """Creates a new outgoing edge from this node to `next_node`.

        Args:
            next_node (FsmNode): The destination node for the new edge.
            op_repr (OpRepr): The operator representation on the new edge.

        Returns:
            FsmEdge: The newly created edge object.
        """
        new_edge = FsmEdge(op_repr, self, next_node)
        self.list_edge_out.append(new_edge)
        next_node.list_edge_in.append(new_edge)
        return new_edge

    def search_host_edge_out(self, merged_edge):
        """Finds an existing outgoing edge that `merged_edge` can be merged into.

        A "host" edge carries the same operator representation as
        `merged_edge` but points to a different destination node.

        Returns:
            FsmEdge | None: A suitable host edge, or None if none exists.
        """
        for edge in self.list_edge_out:
            if merged_edge.is_equal(edge) and (edge.node_to != merged_edge.node_to):
                return edge
        return None

    def search_host_edge_in(self, merged_edge):
        """Finds an existing incoming edge that `merged_edge` can be merged into.

        Returns:
            FsmEdge | None: A suitable host edge, or None if none exists.
        """
        for edge in self.list_edge_in:
            if merged_edge.is_equal(edge) and (edge.node_from != merged_edge.node_from):
                return edge
        return None


class FSM:
    """A Finite-State Machine compressing operator strings into an MPO skeleton.

    The FSM consists of `site_num + 1` layers of nodes, from layer 0 to
    `site_num`. Layer `i` is connected to layer `i+1` by edges that represent
    the local operators at physical site `i`.

    Paths are first collected with `add_path`, where operator strings that are
    identical up to their coefficient are combined. The graph itself is built
    and compressed by `gen_compressed_mat_repr`, which can run once.

    Attributes:
        site_num (int): The number of physical sites in the system.
        head (FsmNode): The single starting node at layer 0.
        tail (FsmNode): The single ending node at the last layer.
        locator (list[list[FsmNode]]): `locator[i]` holds all nodes in layer
            `i`.
        id_op_labels (list[int]): The identity operator label of every site.
    """

    def __init__(self, site_num):
        """Initializes the FSM instance for a given system size.

        Args:
            site_num (int): The number of sites in the physical system.
        """
        assert site_num > 0, "Error: The FSM needs at least one site."
        self.site_num = site_num

        # The FSM always has a single entry (head) and a single exit (tail) point.
        self.head = FsmNode(layer_idx=0, bond_idx=0)
        self.tail = FsmNode(layer_idx=site_num, bond_idx=0)

        self.locator = [[] for _ in range(site_num + 1)]
        self.locator[0].append(self.head)
        self.locator[-1].append(self.tail)

        self.id_op_labels = None

        # op-label signature of a full path -> [coef_site, list of OpRepr]
        self._paths = {}
        self._generated = False

    def replace_id_op_labels(self, id_op_labels: Sequence[int]):
        """Declares the identity operator label of every site.

        Sites outside the range of a path are filled with these labels.

        Args:
            id_op_labels (Sequence[int]): One label per site.
        """
        assert len(id_op_labels) == self.site_num, \
            "Error: Need exactly one identity operator label per site."
        self.id_op_labels = list(id_op_labels)

    def add_path(self, head_idx: int, tail_idx: int, op_reprs: Sequence[OpRepr]):
        """Adds one term, given on the sites from `head_idx` to `tail_idx`.

        The leading `OpRepr` carries the coefficient of the term, the others
        must be bare operators. Sites outside the range act with identity.
        A path whose operators coincide with an earlier path is combined
        with it by adding the coefficients.

        Args:
            head_idx (int): The first site the term acts on.
            tail_idx (int): The last site the term acts on.
            op_reprs (Sequence[OpRepr]): One representation per site in
                ``[head_idx, tail_idx]``.
        """
        assert not self._generated, "Error: Paths cannot be added after generation."
        assert self.id_op_labels is not None, "Error: Identity operator labels are not set."
        assert 0 <= head_idx <= tail_idx < self.site_num, \
            f"Error: Illegal path range [{head_idx}, {tail_idx}] for {self.site_num} sites."
        assert len(op_reprs) == tail_idx - head_idx + 1, \
            "Error: Unmatched length of operator representations and path range."
        for op_repr in op_reprs[1:]:
            assert op_repr.has_trivial_coef(), \
                "Error: Only the leading operator of a path may carry a coefficient."

        # Assemble the full operator string for all sites from 0 to N-1.
        list_op_repr = (
            [OpRepr(label) for label in self.id_op_labels[:head_idx]]
            + list(op_reprs)
            + [OpRepr(label) for label in self.id_op_labels[tail_idx + 1:]]
        )
        signature = tuple(op_repr.strip_coef() for op_repr in list_op_repr)

        like_term = self._paths.get(signature)
        if like_term is None:
            self._paths[signature] = [head_idx, list_op_repr]
            return

        # Add the new coefficients to the coefficient site of the known path.
        coef_site, known_op_reprs = like_term
        coef_site_op_label = known_op_reprs[coef_site].op_label_list()[0]
        extra = OpRepr.from_terms(
            [(coef_label, coef_site_op_label) for coef_label in op_reprs[0].coef_label_list()])
        known_op_reprs[coef_site] = known_op_reprs[coef_site] + extra
        logger.debug("A like term on sites [%d, %d] has been combined.", head_idx, tail_idx)

    @property
    def path_num(self):
        """The number of distinct operator strings collected so far."""
        return len(self._paths)

    def gen_compressed_mat_repr(self) -> List[SparOpReprMat]:
        """Builds the compressed FSM and returns its per-site matrices.

        Returns:
            list[SparOpReprMat]: For site `i`, a matrix with one row per node
                of layer `i` and one column per node of layer `i + 1`.
        """
        assert not self._generated, "Error: The FSM can only be generated once."
        assert self._paths, "Error: No path has been added to the FSM."
        self._generated = True

        for _, list_op_repr in self._paths.values():
            self._new_path(list_op_repr)

        mat_reprs = []
        for layer_idx in range(self.site_num):
            mat = SparOpReprMat(len(self.locator[layer_idx]), len(self.locator[layer_idx + 1]))
            for node in self.locator[layer_idx]:
                for edge in node.list_edge_out:
                    mat.add_elem(edge.node_from.bond_idx, edge.node_to.bond_idx, edge.op_repr)
            mat_reprs.append(mat)
        logger.debug("FSM compressed %d paths into bond dimensions %s.",
                     len(self._paths), self.bond_dimensions())
        return mat_reprs

    def _new_path(self, list_op_repr):
        """Creates a new path in the FSM for one operator string.

        A new chain of nodes and edges is created from head to tail, and then
        merged with the existing paths from both ends where possible.

        Args:
            list_op_repr (list[OpRepr]): The operator of every site.
        """
        assert len(list_op_repr) == self.site_num, "Operator list length mismatch."

        new_edge_register = []

        last_node = self.head
        for layer_idx in range(self.site_num - 1):
            the_node = self._new_successor(last_node, list_op_repr[layer_idx])
            new_edge_register.append(the_node.list_edge_in[0])
            last_node = the_node

        final_edge = self._new_edge(last_node, self.tail, list_op_repr[self.site_num - 1])
        new_edge_register.append(final_edge)

        # 1. Forward merge: from head towards tail.
        for new_edge in new_edge_register:
            if new_edge.node_from.in_degree() > 1: break
            host_edge = new_edge.node_from.search_host_edge_out(new_edge)
            if host_edge is None or host_edge.node_to.in_degree() > 1: break

            is_merged = self._merge_successor(new_edge, host_edge)
            if not is_merged: break

        # 2. Backward merge: from tail towards head.
        new_edge_register.reverse()
        for new_edge in new_edge_register:
            if new_edge.node_from.out_degree() > 1: break
            host_edge = new_edge.node_to.search_host_edge_in(new_edge)
            if host_edge is None or host_edge.node_from.out_degree() > 1: break

            is_merged = self._merge_precursor(new_edge, host_edge)
            if not is_merged: break

    @staticmethod
    def _new_edge(node_from, node_to, op_repr):
        """Creates a single new edge between two existing nodes."""
        return node_from.new_edge_out(node_to, op_repr)

    def _new_successor(self, last_node, op_repr):
        """Creates a new node in the next layer and an edge connecting to it."""
        new_node_layer_idx = last_node.layer_idx + 1
        new_node_bond_idx = len(self.locator[new_node_layer_idx])

        new_node = FsmNode(new_node_layer_idx, new_node_bond_idx)
        self.locator[new_node_layer_idx].append(new_node)

        self._new_edge(last_node, new_node, op_repr)
        return new_node

    @staticmethod
    def _precursor_coincide(node0, node1):
        """Checks if two nodes share any immediate common precursor (parent) node."""
        for edge0 in node0.list_edge_in:
            for edge1 in node1.list_edge_in:
                if edge0.node_from == edge1.node_from:
                    return True
        return False

    @staticmethod
    def _successor_coincide(node0, node1):
        """Checks if two nodes share any immediate common successor (child) node."""
        for edge0 in node0.list_edge_out:
            for edge1 in node1.list_edge_out:
                if edge0.node_to == edge1.node_to:
                    return True
        return False

    def _merge_precursor(self, merged_edge, host_edge):
        """Merges the precursor node of `merged_edge` into the precursor of `host_edge`.

        Part of the backward merge: all incoming edges of the merged node are
        redirected to the host node, and the merged node is removed.

        Returns:
            bool: True if the merge was performed.
        """
        host_node = host_edge.node_from
        merged_node = merged_edge.node_from

        assert host_node.layer_idx == merged_node.layer_idx
        assert host_node.out_degree() <= 1, "Unexpected cross-edge at host node."
        assert merged_node.out_degree() <= 1, "Unexpected cross-edge at merged node."
        if self._precursor_coincide(host_node, merged_node):
            return False  # Merging would create parallel edges.

        self._del_backward_merged_edge(merged_edge)
        self._deliver_edge_in(merged_node, host_node)
        self._remove_node(merged_node)
        return True

    def _merge_successor(self, merged_edge, host_edge):
        """Merges the successor node of `merged_edge` into the successor of `host_edge`.

        Part of the forward merge: all outgoing edges of the merged node are
        redirected to the host node, and the merged node is removed.

        Returns:
            bool: True if the merge was performed.
        """
        host_node = host_edge.node_to
        merged_node = merged_edge.node_to

        assert host_node.layer_idx == merged_node.layer_idx
        assert host_node.in_degree() <= 1, "Unexpected cross-edge at host node."
        assert merged_node.in_degree() <= 1, "Unexpected cross-edge at merged node."
        if self._successor_coincide(host_node, merged_node):
            return False  # Merging would create parallel edges.

        self._del_forward_merged_edge(merged_edge)
        self._deliver_edge_out(merged_node, host_node)
        self._remove_node(merged_node)
        return True

    def _remove_node(self, node):
        """Removes a node from its layer and shifts the bond indices behind it."""
        for other in self.locator[node.layer_idx][(node.bond_idx + 1):]:
            other.bond_idx -= 1
        del self.locator[node.layer_idx][node.bond_idx]

    @staticmethod
    def _del_forward_merged_edge(merged_edge):
        for edge in merged_edge.node_from.list_edge_out[(merged_edge.out_idx + 1):]:
            edge.out_idx -= 1
        del merged_edge.node_from.list_edge_out[merged_edge.out_idx]
        del merged_edge.node_to.list_edge_in[:]

    @staticmethod
    def _del_backward_merged_edge(merged_edge):
        for edge in merged_edge.node_to.list_edge_in[(merged_edge.in_idx + 1):]:
            edge.in_idx -= 1
        del merged_edge.node_to.list_edge_in[merged_edge.in_idx]
        del merged_edge.node_from.list_edge_out[:]

    @staticmethod
    def _deliver_edge_out(merged_node, host_node):
        """Reroutes all outgoing edges from `merged_node` to `host_node`."""
        for edge in merged_node.list_edge_out:
            edge.node_from = host_node
            edge.out_idx = host_node.out_degree()
            host_node.list_edge_out.append(edge)
        del merged_node.list_edge_out[:]

    @staticmethod
    def _deliver_edge_in(merged_node, host_node):
        """Reroutes all incoming edges from `merged_node` to `host_node`."""
        for edge in merged_node.list_edge_in:
            edge.node_to = host_node
            edge.in_idx = host_node.in_degree()
            host_node.list_edge_in.append(edge)
        del merged_node.list_edge_in[:]

    def bond_dimensions(self):
        """Returns the number of states in every layer, head and tail included."""
        return [len(layer) for layer in self.locator]

    def to_symbolic_mpo(self):
        """Generates a symbolic representation of the compressed FSM.

        Returns:
            list[list[list[str]]]: Per site, a nested list of strings like
                ``"c1*O3"`` (coefficient label 1 times operator label 3), with
                ``'0'`` for missing transitions.
        """
        assert self._generated, "Error: Generate the compressed FSM first."
        list_symbol_mpo = []
        for layer_idx in range(self.site_num):
            dim_in = len(self.locator[layer_idx])
            dim_out = len(self.locator[layer_idx + 1])
            symbol_tensor = [['0' for _ in range(dim_out)] for _ in range(dim_in)]
            for node in self.locator[layer_idx]:
                for edge in node.list_edge_out:
                    symbol_tensor[edge.node_from.bond_idx][edge.node_to.bond_idx] = repr(edge.op_repr)
            list_symbol_mpo.append(symbol_tensor)
        return list_symbol_mpo

    def print_symbolic_mpo(self):
        """Prints the symbolic MPO to the console in a readable format."""
        print('')
        for layer_idx, tensor in enumerate(self.to_symbolic_mpo()):
            print(f"--- MPO at Site {layer_idx} ---")
            for row in tensor:
                print(row)
            print('')

    def print_bond_dimensions(self):
        """Prints the bond dimension at each cut of the chain."""
        print('')
        print("Bond Dimensions: ", ' '.join(map(str, self.bond_dimensions())))
        print('')
