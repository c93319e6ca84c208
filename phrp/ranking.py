"""
ranking - grouping, ranking and filtering of peptide-spectrum matches
=====================================================================

Summary
-------

Search results arrive sorted by spectrum. This module groups consecutive
records of the same scan, ranks them within a group by a score, computes
normalized score differences between adjacent hits, selects the top hit per
charge state for first-hits files and applies the permissive (logical OR)
threshold filter used for synopsis files.

Grouping
--------

  :py:func:`group_by_scan` - stream records as per-scan lists, honoring a
  cooperative abort flag.

Ranking
-------

  :py:func:`rank_scores` - dense ranks (ties share a rank).

  :py:func:`delta_norm_scores` - normalized differences to the next score.

  :py:func:`rank_within_groups` - ranks restarting for every group key.

  :py:func:`delta_norm_within_groups` - normalized differences restricted to
  records with the same group key.

Scores that differ by no more than :py:data:`SCORE_EPSILON`, the single
precision machine epsilon (about 1.2e-7), are ties. Pass ``eps=0`` to the
ranking functions to treat only identical scores as ties.

Selection and filtering
-----------------------

  :py:func:`select_first_hits` - best record per charge state.

  :py:func:`or_filter` - build a predicate that passes if any threshold holds.

Dependencies
------------

This module requires :py:mod:`numpy`.

-------------------------------------------------------------------------------
"""

#   Copyright 2012 Anton Goloborodko, Lev Levitsky
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

import numpy as np

SCORE_EPSILON = np.finfo(np.float32).eps


class AbortedError(Exception):
    """Raised by :py:func:`group_by_scan` when processing is aborted."""


def group_by_scan(records, scan_key, should_abort=None):
    """Group consecutive records with the same scan number.

    Parameters
    ----------
    records : iterable
        Records sorted (or at least clustered) by scan.
    scan_key : callable
        Returns the scan number of a record.
    should_abort : callable, optional
        Checked before every record. When it returns :py:const:`True`,
        the buffered group is dropped and :py:exc:`AbortedError` is raised.

    Yields
    ------
    out : list
        Records of one scan, in input order.
    """
    buffer = []
    previous_scan = None
    for record in records:
        if should_abort is not None and should_abort():
            raise AbortedError()
        scan = scan_key(record)
        if previous_scan is not None and scan != previous_scan:
            yield buffer
            buffer = []
        buffer.append(record)
        previous_scan = scan
    if should_abort is not None and should_abort():
        raise AbortedError()
    if buffer:
        yield buffer


def rank_scores(scores, descending=True, eps=SCORE_EPSILON):
    """Assign dense ranks to `scores`.

    The best score gets rank 1; the rank increases only when the score
    changes by more than `eps`, so ties share a rank.

    Parameters
    ----------
    scores : array-like
    descending : bool, optional
        If :py:const:`True` (default), higher scores are better.
    eps : float, optional

    Returns
    -------
    out : numpy.ndarray
        Integer ranks aligned with `scores`.
    """
    scores = np.asarray(scores, dtype=np.float64)
    if not scores.size:
        return np.zeros(0, dtype=np.int64)
    order = np.argsort(-scores if descending else scores, kind='mergesort')
    ordered = scores[order]
    changes = np.abs(np.diff(ordered)) > eps
    ranks = np.empty(scores.shape[0], dtype=np.int64)
    ranks[order] = np.concatenate(([1], 1 + np.cumsum(changes)))
    return ranks


def delta_norm_scores(ordered_scores, default=0.0, eps=SCORE_EPSILON):
    """Normalized difference between each score and the next one,
    ``abs((s[i] - s[i+1]) / s[i])``.

    The last score gets 0; a zero score gets `default`.

    Parameters
    ----------
    ordered_scores : array-like
        Scores in rank order.

    Returns
    -------
    out : numpy.ndarray
    """
    s = np.asarray(ordered_scores, dtype=np.float64)
    out = np.zeros(s.shape[0], dtype=np.float64)
    if s.shape[0] < 2:
        return out
    current, following = s[:-1], s[1:]
    nonzero = np.abs(current) > eps
    with np.errstate(divide='ignore', invalid='ignore'):
        values = np.abs((current - following) / np.where(nonzero, current, 1.0))
    out[:-1] = np.where(nonzero, values, default)
    return out


def rank_within_groups(groups, scores, descending=True, eps=SCORE_EPSILON):
    """Dense ranks of `scores`, restarting at 1 for every distinct value
    of `groups`."""
    groups = np.asarray(groups)
    scores = np.asarray(scores, dtype=np.float64)
    ranks = np.zeros(scores.shape[0], dtype=np.int64)
    for g in np.unique(groups):
        mask = groups == g
        ranks[mask] = rank_scores(scores[mask], descending, eps)
    return ranks


def delta_norm_within_groups(groups, scores, descending=True, default=0.0, eps=SCORE_EPSILON):
    """For each record, the normalized difference to the next-ranked record
    with the same group key (0 for the last one)."""
    groups = np.asarray(groups)
    scores = np.asarray(scores, dtype=np.float64)
    out = np.zeros(scores.shape[0], dtype=np.float64)
    for g in np.unique(groups):
        idx = np.nonzero(groups == g)[0]
        order = idx[np.argsort(-scores[idx] if descending else scores[idx], kind='mergesort')]
        out[order] = delta_norm_scores(scores[order], default, eps)
    return out


def select_first_hits(group, sort_key, charge_key):
    """Sort `group` with `sort_key` and keep the first record for every
    distinct charge, in sorted order."""
    seen = set()
    hits = []
    for record in sorted(group, key=sort_key):
        charge = charge_key(record)
        if charge not in seen:
            seen.add(charge)
            hits.append(record)
    return hits


def or_filter(*predicates):
    """Combine predicates: a record passes if any of them holds.

    >>> passes = or_filter(lambda r: r['p'] <= 0.2, lambda r: r['s'] >= 50)
    >>> passes({'p': 0.5, 's': 60})
    True
    """
    def passes(record):
        return any(p(record) for p in predicates)
    return passes
