from analysis import format_matrix, main


def test_main_lecture_network_prints_ranking(capsys):
    code = main(["--lecture", "--show_matrices", "--top", "4", "--log_every", "0"])

    out = capsys.readouterr().out
    assert code == 0
    assert "=== Pages sorted by PageRank ===" in out
    assert "1. page 1 " in out
    assert "=== Hyperlink matrix H ===" in out
    assert "0.33" in out


def test_main_search_on_sample_network(capsys):
    code = main(["--sample", "--search", "zzz", "--log_every", "0"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Search result for 'zzz'" in out
    assert "-  -" in out


def test_main_dangling_network_fails_without_flag():
    assert main(["--pages", "4", "--links", "0", "--seed", "1"]) == 2


def test_main_dangling_network_allowed(capsys):
    code = main(["--pages", "4", "--links", "0", "--seed", "1", "--allow_dangling", "--log_every", "0"])

    assert code == 0
    assert "Pages sorted by PageRank" in capsys.readouterr().out


def test_main_invalid_configuration():
    assert main(["--pages", "3", "--links", "10"]) == 2
    assert main(["--lecture", "--damping", "1.0"]) == 2


def test_format_matrix():
    assert format_matrix([[0.5, 1], [0, 0.25]]) == "0.50 1.00\n0.00 0.25"
