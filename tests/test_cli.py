"""End-to-end tests for the command line interface."""

from datetime import date

import click
import pytest

from finledger.cli.date_filters import resolve_cli_date_range
from finledger.cli.main import cli


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Personal finance ledger" in result.output


class TestAccountCommands:
    def test_create_bank(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "account", "create-bank", "Checking", "--balance", "1,000")

        assert result.exit_code == 0
        assert "Created bank account 'Checking'" in result.output
        assert "ID:" in result.output

    def test_create_card_and_list(self, cli_runner, temp_db):
        created = run(cli_runner, temp_db, "account", "create-card", "Sapphire", "--limit", "5000", "--balance", "250")
        assert created.exit_code == 0
        assert "Created credit card 'Sapphire'" in created.output

        listed = run(cli_runner, temp_db, "account", "list")
        assert listed.exit_code == 0
        assert "Sapphire" in listed.output
        assert "250.00" in listed.output

    def test_list_empty(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "account", "list")

        assert result.exit_code == 0
        assert "No accounts found" in result.output

    def test_duplicate_name_fails(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "account", "create-bank", "Checking")
        result = run(cli_runner, temp_db, "account", "create-bank", "Checking")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_show_unknown_account(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "account", "show", "Nope")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_account_lists_known_names(self, cli_runner, temp_db, checking, savings):
        result = run(cli_runner, temp_db, "account", "show", "Chequing")

        assert result.exit_code == 1
        assert "Known accounts: Checking, Savings" in result.output

    def test_show_card(self, cli_runner, temp_db, card):
        result = run(cli_runner, temp_db, "account", "show", "Everyday Card")

        assert result.exit_code == 0
        assert "Balance:       $300.00" in result.output
        assert "Available:     $700.00" in result.output
        assert "Utilization:   30.0%" in result.output


class TestAddCommand:
    def test_add_expense(self, cli_runner, temp_db, checking):
        result = run(
            cli_runner, temp_db, "add", "--account", "Checking", "--amount", "42.10", "--date", "2024-06-01",
            "--category", "Groceries",
        )

        assert result.exit_code == 0
        assert "Created transaction" in result.output
        assert "Amount: $42.10 (expense)" in result.output

        shown = run(cli_runner, temp_db, "account", "show", "Checking")
        assert "Balance:       $957.90" in shown.output

    def test_amount_must_be_positive(self, cli_runner, temp_db, checking):
        result = run(cli_runner, temp_db, "add", "--account", "Checking", "--amount", "0")

        assert result.exit_code == 1
        assert "Invalid amount" in result.output

    def test_sub_cent_amount_is_rejected(self, cli_runner, temp_db, checking):
        result = run(cli_runner, temp_db, "add", "--account", "Checking", "--amount", "10.555")

        assert result.exit_code == 1
        assert "fractions of a cent" in result.output
        assert "Balance:       $1,000.00" in run(cli_runner, temp_db, "account", "show", "Checking").output

    def test_income_notification(self, cli_runner, temp_db, checking):
        run(cli_runner, temp_db, "income", "create", "Salary", "--type", "salary")
        run(cli_runner, temp_db, "income", "rule", "1", "--contains", "payroll")

        result = run(
            cli_runner, temp_db, "add", "--account", "Checking", "--type", "income", "--amount", "2500",
            "--description", "ACME PAYROLL 0615",
        )

        assert result.exit_code == 0
        assert "* Income detected:" in result.output
        assert "Salary" in result.output

    def test_card_purchase_earns_reward_and_completes_bonus(self, cli_runner, temp_db, card):
        bonus = run(
            cli_runner, temp_db, "card", "bonus", "add", "Everyday Card", "--title", "Welcome", "--spend", "40",
            "--end", "in 90 days",
        )
        assert bonus.exit_code == 0

        result = run(cli_runner, temp_db, "add", "--account", "Everyday Card", "--amount", "50")

        assert result.exit_code == 0
        assert "Reward: $0.50" in result.output
        assert "! Bonus completed:" in result.output


class TestTransferCommand:
    def test_card_payment(self, cli_runner, temp_db, checking, card):
        result = run(
            cli_runner, temp_db, "transfer", "--from", "Checking", "--to", "Everyday Card", "--amount", "100"
        )

        assert result.exit_code == 0
        assert "Recorded payment of $100.00" in result.output
        assert "Balance:       $900.00" in run(cli_runner, temp_db, "account", "show", "Checking").output
        assert "Balance:       $200.00" in run(cli_runner, temp_db, "account", "show", "Everyday Card").output

    def test_bank_transfer(self, cli_runner, temp_db, checking, savings):
        result = run(cli_runner, temp_db, "transfer", "--from", "Checking", "--to", "Savings", "--amount", "200")

        assert result.exit_code == 0
        assert "Transferred $200.00 (transactions" in result.output

    def test_hiding_a_leg_hides_the_transfer(self, cli_runner, temp_db, checking, savings):
        run(cli_runner, temp_db, "transfer", "--from", "Checking", "--to", "Savings", "--amount", "200")

        result = run(cli_runner, temp_db, "transaction", "hide", "2")

        assert result.exit_code == 0
        assert "Hid transactions 1, 2" in result.output
        assert "Balance:       $1,000.00" in run(cli_runner, temp_db, "account", "show", "Checking").output

    def test_same_account(self, cli_runner, temp_db, checking):
        result = run(cli_runner, temp_db, "transfer", "--from", "Checking", "--to", "Checking", "--amount", "1")

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCardCommands:
    def test_suggest_prefers_category_reward(self, cli_runner, temp_db, card):
        run(cli_runner, temp_db, "account", "create-card", "Dining Card", "--limit", "2000", "--reward-rate", "1")
        run(cli_runner, temp_db, "card", "reward", "set", "Dining Card", "Food & Dining", "--rate", "3")

        result = run(cli_runner, temp_db, "card", "suggest", "--amount", "100", "--category", "Food & Dining")

        assert result.exit_code == 0
        assert "Use Dining Card" in result.output
        assert "$3.00" in result.output

    def test_quote_single_card(self, cli_runner, temp_db, card):
        result = run(cli_runner, temp_db, "card", "quote", "Everyday Card", "--amount", "50")

        assert result.exit_code == 0
        assert "earns $0.50" in result.output

    def test_suggest_without_cards(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "card", "suggest", "--amount", "100")

        assert result.exit_code == 0
        assert "No card to suggest." in result.output

    def test_reward_on_bank_account_fails(self, cli_runner, temp_db, checking):
        result = run(cli_runner, temp_db, "card", "reward", "list", "Checking")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_bonus_list_and_alerts(self, cli_runner, temp_db, card):
        run(
            cli_runner, temp_db, "card", "bonus", "add", "Everyday Card", "--title", "Welcome", "--spend", "1000",
            "--spent", "900", "--end", "in 5 days",
        )

        listed = run(cli_runner, temp_db, "card", "bonus", "list")
        assert listed.exit_code == 0
        assert "Welcome" in listed.output
        assert "in_progress" in listed.output
        assert "$100.00 to go" in listed.output

        alerts = run(cli_runner, temp_db, "card", "alerts")
        assert alerts.exit_code == 0
        assert "bonus almost reached" in alerts.output
        assert "! [high]" in alerts.output

    def test_alerts_empty(self, cli_runner, temp_db, card):
        result = run(cli_runner, temp_db, "card", "alerts")

        assert result.exit_code == 0
        assert "No alerts." in result.output

    def test_illegal_bonus_status(self, cli_runner, temp_db, card):
        run(cli_runner, temp_db, "card", "bonus", "add", "Everyday Card", "--title", "Welcome", "--spend", "10",
            "--end", "in 5 days")

        result = run(cli_runner, temp_db, "card", "bonus", "status", "1", "paid_out")

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestIncomeCommands:
    def test_create_rule_and_list(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "income", "create", "Salary", "--expected", "5000")
        rule = run(cli_runner, temp_db, "income", "rule", "1", "--payer", "ACME PAYROLL")
        assert rule.exit_code == 0

        result = run(cli_runner, temp_db, "income", "list")

        assert result.exit_code == 0
        assert "Salary" in result.output
        assert "exact_payer 'ACME PAYROLL'" in result.output
        assert "Expected monthly total: $5,000.00" in result.output

    def test_rule_needs_exactly_one_kind(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "income", "create", "Salary")
        result = run(cli_runner, temp_db, "income", "rule", "1", "--payer", "A", "--contains", "B")

        assert result.exit_code == 1
        assert "exactly one" in result.output


class TestInsuranceCommands:
    def test_policy_lifecycle(self, cli_runner, temp_db):
        added = run(
            cli_runner, temp_db, "insurance", "policy", "add", "AUTO-1", "--provider", "Safe Drive", "--name", "Car",
            "--premium", "120", "--effective", "2024-01-31", "--expires", "2024-12-31", "--type", "auto",
        )
        assert added.exit_code == 0
        assert "Added policy 'Car'" in added.output

        paid = run(cli_runner, temp_db, "insurance", "policy", "pay", "1", "--date", "2024-01-30")
        assert paid.exit_code == 0
        assert "Next due 2024-02-29" in paid.output

        listed = run(cli_runner, temp_db, "insurance", "policy", "list")
        assert "Safe Drive" in listed.output

    def test_claim_lifecycle(self, cli_runner, temp_db):
        run(
            cli_runner, temp_db, "insurance", "policy", "add", "HOME-1", "--provider", "Roof Co", "--name", "Home",
            "--premium", "90", "--effective", "2024-01-01", "--expires", "2024-12-31",
        )
        filed = run(
            cli_runner, temp_db, "insurance", "claim", "add", "1", "CLM-1", "--amount", "800",
            "--date-of-loss", "2024-03-02",
        )
        assert filed.exit_code == 0
        assert "Filed claim CLM-1" in filed.output

        assert run(cli_runner, temp_db, "insurance", "claim", "status", "1", "approved").exit_code == 0
        paid = run(cli_runner, temp_db, "insurance", "claim", "status", "1", "paid", "--amount", "750")
        assert paid.exit_code == 0

        listed = run(cli_runner, temp_db, "insurance", "claim", "list", "--policy", "1")
        assert "paid $750.00" in listed.output

    def test_expense_is_linked_to_policy(self, cli_runner, temp_db, checking):
        run(
            cli_runner, temp_db, "insurance", "policy", "add", "AUTO-2", "--provider", "Safe Drive", "--name", "Car",
            "--premium", "120", "--effective", "2024-01-01", "--expires", "2024-12-31", "--merchant", "safe drive",
        )

        result = run(
            cli_runner, temp_db, "add", "--account", "Checking", "--amount", "120", "--description", "SAFE DRIVE INS",
        )

        assert result.exit_code == 0
        assert "Linked to insurance policy 1" in result.output


class TestBudgetCommands:
    def test_spending_shows_against_limit(self, cli_runner, temp_db, checking):
        created = run(
            cli_runner, temp_db, "budget", "create", "Groceries", "--category", "Food & Dining", "--amount", "100",
            "--start", "2024-06-01",
        )
        assert created.exit_code == 0
        assert "Created budget 'Groceries'" in created.output
        run(
            cli_runner, temp_db, "add", "--account", "Checking", "--amount", "120", "--category", "Food & Dining",
            "--date", "2024-06-05",
        )

        result = run(cli_runner, temp_db, "budget", "list", "--date", "2024-06-15")

        assert result.exit_code == 0
        assert "$120.00 / $100.00 (120.00%)" in result.output
        assert "OVER BUDGET" in result.output

    def test_delete_needs_confirmation(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "budget", "create", "Fun", "--category", "Entertainment", "--amount", "50")

        cancelled = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "budget", "delete", "1"], input="n\n"
        )
        assert "Deletion cancelled." in cancelled.output

        deleted = run(cli_runner, temp_db, "budget", "delete", "1", "--yes")
        assert deleted.exit_code == 0
        assert "No budgets found." in run(cli_runner, temp_db, "budget", "list").output


class TestGoalCommands:
    def test_contributions_complete_goal(self, cli_runner, temp_db):
        created = run(cli_runner, temp_db, "goal", "create", "Laptop", "--target", "1500", "--saved", "1000")
        assert created.exit_code == 0

        added = run(cli_runner, temp_db, "goal", "add", "1", "500")

        assert added.exit_code == 0
        assert "'Laptop' now has $1,500.00 of $1,500.00" in added.output
        assert "Goal reached!" in added.output
        assert "completed" in run(cli_runner, temp_db, "goal", "list").output

    def test_paused_goal_rejects_contribution(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "goal", "create", "Laptop", "--target", "1500")
        assert run(cli_runner, temp_db, "goal", "pause", "1").exit_code == 0

        result = run(cli_runner, temp_db, "goal", "add", "1", "50")

        assert result.exit_code == 1
        assert "paused" in result.output


class TestRecurringCommands:
    def test_pay_records_expense(self, cli_runner, temp_db, checking):
        created = run(
            cli_runner, temp_db, "recurring", "create", "Rent", "--amount", "150", "--due", "2024-06-20",
            "--account", "Checking",
        )
        assert created.exit_code == 0

        paid = run(cli_runner, temp_db, "recurring", "pay", "1", "--date", "2024-06-19")

        assert paid.exit_code == 0
        assert "Paid 'Rent' as transaction 1; next due 2024-07-20" in paid.output
        assert "Balance:       $850.00" in run(cli_runner, temp_db, "account", "show", "Checking").output

    def test_list_shows_monthly_cost(self, cli_runner, temp_db):
        run(cli_runner, temp_db, "recurring", "create", "Gym", "--amount", "30", "--due", "2024-07-01")

        result = run(cli_runner, temp_db, "recurring", "list")

        assert result.exit_code == 0
        assert "Gym" in result.output
        assert "About $30.00 per month" in result.output


class TestDateRange:
    def _ctx(self) -> click.Context:
        return click.Context(click.Command("test"))

    def test_rejects_multiple_periods(self, capsys):
        with pytest.raises(click.exceptions.Exit) as excinfo:
            resolve_cli_date_range(
                self._ctx(), start_date=None, end_date=None, period_flags={"this-month": True, "last-year": True}
            )

        assert excinfo.value.exit_code == 1
        assert "Only one period option" in capsys.readouterr().err

    def test_rejects_period_with_explicit_dates(self, capsys):
        with pytest.raises(click.exceptions.Exit):
            resolve_cli_date_range(
                self._ctx(), start_date="2024-01-01", end_date=None, period_flags={"this-month": True}
            )

        assert "cannot be combined" in capsys.readouterr().err

    def test_explicit_dates(self):
        start, end = resolve_cli_date_range(
            self._ctx(), start_date="2024-01-02", end_date="2024-01-05", period_flags={}
        )

        assert (start, end) == (date(2024, 1, 2), date(2024, 1, 5))
