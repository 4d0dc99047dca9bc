import numpy as np
import pytest

from network import LECTURE_ADJACENCY, SAMPLE_ADJACENCY, InvalidConfiguration, from_adjacency, generate_random, make_rng
from pagerank import (
    DanglingGraphError,
    blend_damping,
    build_hyperlink_matrix,
    compute_ranking,
    power_iterate,
    sort_ranks,
)


def test_pagerank_lecture_network_basic_properties():
    network = from_adjacency(LECTURE_ADJACENCY)

    result = compute_ranking(network, damping_factor=0.15, epsilon=0.001, max_iterations=50)

    # 1) Converged before the cap
    assert result.converged
    assert 2 <= result.iterations < 50

    # 2) Non-negative and (no dangling pages) sums to ~1
    assert all(score >= 0 for _, score in result.ranking)
    assert result.rank_vector.sum() == pytest.approx(1.0, abs=1e-9)

    # 3) Page 1 collects all of page 3's rank, page 3 is second
    order = [index for index, _ in result.ranking]
    assert order == [0, 2, 3, 1]


def test_hyperlink_matrix_lecture_values():
    hyper = build_hyperlink_matrix(np.array(LECTURE_ADJACENCY))

    expected = np.array([
        [0, 0, 1, 1 / 2],
        [1 / 3, 0, 0, 0],
        [1 / 3, 1 / 2, 0, 1 / 2],
        [1 / 3, 1 / 2, 0, 0],
    ])
    assert np.allclose(hyper, expected)
    assert np.allclose(hyper.sum(axis=0), 1.0)


def test_hyperlink_matrix_dangling_column_stays_zero_and_diagonal_ignored():
    adj = np.array([
        [1, 1, 0],
        [1, 0, 0],
        [0, 1, 0],
    ])

    hyper = build_hyperlink_matrix(adj)

    # diagonal forced to zero even though adj[0, 0] == 1
    assert hyper[0, 0] == 0
    assert hyper[1, 0] == pytest.approx(0.5)
    # column 2 has no inbound links
    assert np.all(hyper[:, 2] == 0)
    # input left untouched
    assert adj[0, 0] == 1


def test_damped_columns_sum_to_one_without_dangling():
    rng = make_rng(7)
    for n in (2, 3, 5, 9):
        adj = (rng.random((n, n)) < 0.5).astype(int)
        np.fill_diagonal(adj, 0)
        # make sure every column has an inbound link
        for j in range(n):
            if adj[:, j].sum() == 0:
                adj[(j + 1) % n, j] = 1

        damped = blend_damping(build_hyperlink_matrix(adj), 0.15)

        assert np.allclose(damped.sum(axis=0), 1.0, atol=1e-9)


def test_damped_dangling_column_sums_to_damping_factor():
    adj = np.array([
        [0, 1, 1],
        [1, 0, 1],
        [1, 0, 0],
    ])
    adj[:, 2] = 0

    damped = blend_damping(build_hyperlink_matrix(adj), 0.15)

    assert damped[:, 2].sum() == pytest.approx(0.15)


@pytest.mark.parametrize("damping", [-0.1, 1.0, 1.5])
def test_blend_damping_rejects_out_of_range(damping):
    with pytest.raises(InvalidConfiguration):
        blend_damping(np.zeros((2, 2)), damping)


def test_power_iterate_random_stochastic_matrices_stay_non_negative():
    rng = make_rng(42)
    for n in (1, 2, 4, 10):
        m = rng.random((n, n))
        m = m / m.sum(axis=0)

        # starting vector r0 = 1/N sums to 1
        assert np.full(n, 1.0 / n).sum() == pytest.approx(1.0)

        outcome = power_iterate(m, max_iterations=200, epsilon=1e-6, log_every_iters=0)

        assert outcome.converged
        assert np.all(outcome.rank_vector >= 0)
        assert outcome.rank_vector.sum() == pytest.approx(1.0)


def test_power_iterate_matches_naive_matrix_power():
    damped = blend_damping(build_hyperlink_matrix(np.array(SAMPLE_ADJACENCY)), 0.15)

    outcome = power_iterate(damped, max_iterations=50, epsilon=0.001, log_every_iters=0)

    r0 = np.full(8, 1 / 8)
    naive = np.linalg.matrix_power(damped, outcome.iterations) @ r0
    assert np.allclose(outcome.rank_vector, naive)


def test_power_iterate_cap_reports_non_convergence():
    damped = blend_damping(build_hyperlink_matrix(np.array(LECTURE_ADJACENCY)), 0.15)

    outcome = power_iterate(damped, max_iterations=1, epsilon=0.001, log_every_iters=0)

    assert not outcome.converged
    assert outcome.iterations == 1
    assert np.allclose(outcome.rank_vector, damped @ np.full(4, 0.25))


def test_power_iterate_is_deterministic():
    damped = blend_damping(build_hyperlink_matrix(np.array(SAMPLE_ADJACENCY)), 0.15)

    a = power_iterate(damped, log_every_iters=0)
    b = power_iterate(damped, log_every_iters=0)

    assert a.iterations == b.iterations
    assert np.array_equal(a.rank_vector, b.rank_vector)


def test_sort_ranks_is_stable_on_ties():
    vector = np.array([0.1, 0.3, 0.1, 0.3, 0.2])

    first = sort_ranks(vector)
    second = sort_ranks(vector)

    assert [i for i, _ in first] == [1, 3, 4, 0, 2]
    assert first == second


def test_compute_ranking_rejects_dangling_network():
    network = generate_random(4, 0, make_rng(1))

    with pytest.raises(DanglingGraphError) as exc:
        compute_ranking(network)

    assert exc.value.dangling == [1, 2, 3, 4]


def test_compute_ranking_allow_dangling_returns_unnormalised_result():
    network = from_adjacency([
        [0, 1, 0],
        [1, 0, 0],
        [1, 1, 0],
    ])

    result = compute_ranking(network, allow_dangling=True, log_every_iters=0)

    assert len(result.ranking) == 3
    assert result.rank_vector.sum() < 1.0
    assert all(score >= 0 for _, score in result.ranking)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"damping_factor": 1.0},
        {"damping_factor": -0.01},
        {"epsilon": 0.0},
        {"max_iterations": 0},
    ],
)
def test_compute_ranking_invalid_configuration(kwargs):
    with pytest.raises(InvalidConfiguration):
        compute_ranking(from_adjacency(LECTURE_ADJACENCY), **kwargs)
