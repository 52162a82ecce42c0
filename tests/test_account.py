"""Tests for entity and account commands."""

from sarrafi.cli.main import cli


def test_entity_create_customer(cli_runner, temp_db):
    """Test creating a customer with a code."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "entity", "create", "Ahmad Karimi", "--code", "C-100"]
    )

    assert result.exit_code == 0
    assert "Created customer 'Ahmad Karimi'" in result.output
    assert "ID:" in result.output


def test_entity_create_partner_and_list(cli_runner, temp_db, sample_customer):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "entity", "create", "Kabul Exchange", "--kind", "partner"]
    )
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "entity", "list"])

    assert result.exit_code == 0
    assert "Ahmad Karimi" in result.output
    assert "Kabul Exchange" in result.output
    assert "Code: C-100" in result.output


def test_entity_create_duplicate_code(cli_runner, temp_db, sample_customer):
    """Test that a reused customer code fails."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "entity", "create", "Other", "--code", "C-100"]
    )

    assert result.exit_code == 1
    assert "already in use" in result.output


def test_entity_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "entity", "list"])

    assert result.exit_code == 0
    assert "No customers or partners found" in result.output


def test_account_create_rented(cli_runner, temp_db):
    """Test creating a rented account."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "account", "create", "Melli 1234",
            "--kind", "rented", "--currency", "irt-bank", "--bank", "Melli",
        ],
    )

    assert result.exit_code == 0
    assert "Created rented account 'Melli 1234'" in result.output


def test_account_create_rented_wrong_currency(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "account", "create", "Melli USD", "--kind", "rented", "--currency", "USD"],
    )

    assert result.exit_code == 1
    assert "IRT_BANK" in result.output


def test_account_create_unknown_currency(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Pounds", "--currency", "GBP"]
    )

    assert result.exit_code == 1
    assert "Unknown currency 'GBP'" in result.output


def test_account_create_dedicated_with_owner(cli_runner, temp_db, sample_customer):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "account", "create", "Ahmad EUR",
            "--kind", "dedicated", "--currency", "EUR", "--owner", "C-100",
        ],
    )

    assert result.exit_code == 0
    assert "Created dedicated account 'Ahmad EUR'" in result.output


def test_account_create_duplicate(cli_runner, temp_db, cashbox_usd):
    """Test creating duplicate account name fails."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Cashbox USD", "--kind", "cashbox"]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_account_list_with_data(cli_runner, temp_db, cashbox_usd, bank_eur):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "Cashbox USD" in result.output
    assert "Sparkasse EUR" in result.output
    assert "Bank: Sparkasse" in result.output


def test_account_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_deactivate_and_activate(cli_runner, temp_db, rented_account):
    """Test toggling an account by name."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "deactivate", "Melli 1234"]
    )
    assert result.exit_code == 0
    assert f"Deactivated account {rented_account.id}" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list", "--kind", "rented"])
    assert "Inactive" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "activate", str(rented_account.id)]
    )
    assert result.exit_code == 0
    assert f"Activated account {rented_account.id}" in result.output


def test_account_deactivate_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "deactivate", "Nowhere"])

    assert result.exit_code == 1
    assert "Account 'Nowhere' not found" in result.output


def test_help_does_not_need_database(cli_runner, tmp_path):
    db_path = tmp_path / "never-created.db"
    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])

    assert result.exit_code == 0
    assert "Currency exchange back-office ledger" in result.output
    assert not db_path.exists()
