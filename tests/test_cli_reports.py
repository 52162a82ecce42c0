"""Tests for rate, commission, balance, report and snapshot commands."""

import logging
from datetime import datetime
from decimal import Decimal

import pytest

from sarrafi.cli.main import cli
from sarrafi.domain.entities import Currency


@pytest.fixture
def books(transaction_service, rate_service, sample_customer, sample_partner, cashbox_usd, rented_account):
    """Record a small set of books for reporting."""
    rate_service.set_rate(Currency.EUR, Decimal("0.9"))
    transaction_service.record_deposit(cashbox_usd.id, Decimal("1000"), timestamp=datetime(2024, 3, 1))
    transaction_service.record_debit(sample_customer.id, Decimal("200"), Currency.USD, timestamp=datetime(2024, 3, 2))
    transaction_service.record_credit(
        sample_partner.id, Decimal("300"), Currency.EUR, timestamp=datetime(2024, 3, 3), description="Settlement"
    )
    transaction_service.record_deposit(
        rented_account.id, Decimal("5000000"), owner_id=sample_customer.id, timestamp=datetime(2024, 3, 4)
    )
    transaction_service.record_withdrawal(
        rented_account.id,
        Decimal("1000000"),
        commission_percentage=Decimal("1"),
        owner_id=sample_customer.id,
        timestamp=datetime(2024, 3, 5),
    )


class TestRateCommands:
    def test_set_and_list(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "rate", "set", "EUR", "0.92"])
        assert result.exit_code == 0
        assert "Set EUR rate to 0.92 per USD" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "rate", "list"])
        assert result.exit_code == 0
        assert "EUR" in result.output
        assert "No usable rate for: AFN, PKR, IRT_BANK, IRT_CASH" in result.output

    def test_usd_rate_refused(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "rate", "set", "USD", "2"])

        assert result.exit_code == 1
        assert "fixed at 1" in result.output

    def test_zero_rate_refused(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "rate", "set", "AFN", "0"])

        assert result.exit_code == 1
        assert "positive" in result.output


class TestCommissionCommands:
    """Tests for the commission transfer workflow commands."""

    def test_workflow(self, cli_runner, temp_db, sample_customer, bank_eur):
        db = ["--db-path", temp_db.database_path]
        result = cli_runner.invoke(
            cli,
            db + ["commission", "log", "1000", "EUR", "--commission", "5", "--initiator", "C-100",
                  "--received-into", "Sparkasse EUR", "--receipt", "CT-1"],
        )
        assert result.exit_code == 0
        assert "Logged commission transfer 1" in result.output

        result = cli_runner.invoke(cli, db + ["commission", "approve-deposit", "1"])
        assert "now PendingExecution" in result.output

        result = cli_runner.invoke(
            cli, db + ["commission", "execute", "1", "--paid-from", "Sparkasse EUR", "--destination", "IT60 X054"]
        )
        assert result.exit_code == 0
        assert "pay 950.00 EUR, commission 50.00" in result.output

        result = cli_runner.invoke(cli, db + ["commission", "approve-withdrawal", "1"])
        assert "now Completed" in result.output

        result = cli_runner.invoke(cli, db + ["commission", "list", "--status", "Completed"])
        assert "paid 950.00" in result.output

    def test_invalid_transition(self, cli_runner, temp_db, commission_service):
        transfer_id = commission_service.log_transfer(None, Decimal("10"), Currency.USD, Decimal("1"))

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "commission", "approve-withdrawal", str(transfer_id)]
        )

        assert result.exit_code == 1
        assert "cannot move from PendingDepositApproval to Completed" in result.output

    def test_reject(self, cli_runner, temp_db, commission_service):
        transfer_id = commission_service.log_transfer(None, Decimal("10"), Currency.USD, Decimal("1"))

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "commission", "reject", str(transfer_id)])

        assert result.exit_code == 0
        assert "now Rejected" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "commission", "list"])
        assert "No commission transfers found" in result.output


class TestBalanceCommands:
    def test_main_balances(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "balances"])

        assert result.exit_code == 0
        assert "-200 USD" in result.output
        assert "300 EUR" in result.output

    def test_unified_balances(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "balances", "--unified"])

        assert result.exit_code == 0
        assert "-200 USD | 3,990,000 IRT_BANK" in result.output

    def test_rented_balances(self, cli_runner, temp_db, books):
        """Test rented ledger balances per account and counterparty."""
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "balances", "--namespace", "rented"])

        assert result.exit_code == 0
        assert "Melli 1234" in result.output
        assert "3,990,000.00" in result.output
        assert "Ahmad Karimi" in result.output
        assert "last activity 2024-03-05" in result.output

    def test_treasury_balances(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "balances", "--namespace", "treasury"])

        assert result.exit_code == 0
        assert "1,000.00" in result.output

    def test_statement(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "statement", "Kabul Exchange"])

        assert result.exit_code == 0
        assert "Statement: Kabul Exchange" in result.output
        assert "Settlement" in result.output
        assert "300.00 EUR" in result.output

    def test_statement_csv(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "statement", "C-100", "--csv"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Date,Type,Account,Currency,Amount,Change,Balance,Description"
        assert lines[1].startswith("2024-03-02 00:00,debit,,USD,")


class TestReportCommands:
    """Tests for the report commands."""

    def test_net_worth(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "report", "net-worth"])

        assert result.exit_code == 0
        assert "Net Worth" in result.output
        assert "Gross Assets:" in result.output
        assert "Liabilities:             333.33 USD" in result.output
        assert "Missing Rates:           IRT_BANK" in result.output
        assert "Pulse: assets 1,200.00" in result.output

    def test_net_worth_csv(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "report", "net-worth", "--csv"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Category,Currency,Amount,Amount (USD)"
        assert "Pulse" not in result.output

    def test_account_statement(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path", temp_db.database_path,
                "report", "account-statement", "Melli 1234",
                "--start-date", "2024-03-01", "--end-date", "2024-03-31",
            ],
        )

        assert result.exit_code == 0
        assert "Total Receipts:          5,000,000.00 IRT_BANK" in result.output
        assert "Total Payouts:           1,010,000.00 IRT_BANK" in result.output

    def test_account_statement_outside_range(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "report", "account-statement", "Melli 1234", "--end-date", "2024-02-01"],
        )

        assert result.exit_code == 0
        assert "No entries." in result.output


class TestSnapshotCommands:
    def test_create_and_list(self, cli_runner, temp_db, books):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "--user", "maryam", "snapshot", "create", "C-100", "--notes", "Month end"],
        )
        assert result.exit_code == 0
        assert "-200 USD | 3,990,000 IRT_BANK (rented)" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "snapshot", "list", "--entity", "C-100"])
        assert result.exit_code == 0
        assert "by maryam" in result.output
        assert "Notes: Month end" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "snapshot", "list"])
        assert "No snapshots found" in result.output


def test_verbose_logs_to_stderr(cli_runner, temp_db):
    package_logger = logging.getLogger("sarrafi")
    try:
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "-v", "rate", "set", "EUR", "0.9"])
        assert result.exit_code == 0
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.handlers = []
        package_logger.setLevel(logging.NOTSET)
