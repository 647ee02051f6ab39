import pytest

from mealdelivery.csv_import import (
    TEMPLATE_CSV, CsvFormatError, CsvValidationError, SeniorImporter, parse_csv, validate_rows,
)
from conftest import FakeStore

HEADER = "name,age,household_type,family_adults,family_children,address,delivery_method"


def _csv(*lines, header=HEADER):
    return "\n".join((header,) + lines) + "\n"


def _valid_rows(n):
    return parse_csv(_csv(*[f"Senior {i},{60 + i % 40},single,1,0,{i} Elm St,doorstep" for i in range(n)]))


def test_valid_three_row_csv_passes_through():
    rows = parse_csv(_csv(
        "Rosa Diaz,81,single,1,0,12 Pine Rd,doorstep",
        "Tom Lee,70,family,2,3,4 Birch Ln,phone_confirmed",
        "Ada King,95,single,1,0,7 Cedar Ct,family_member",
    ))
    assert len(rows) == 3
    assert validate_rows(rows) == []
    assert rows[1]["family_children"] == "3"


def test_age_out_of_range_yields_single_age_error():
    rows = parse_csv(_csv("Rosa Diaz,150,single,1,0,12 Pine Rd,doorstep"))
    errors = validate_rows(rows)
    assert len(errors) == 1
    assert "Age" in errors[0]
    assert errors[0].startswith("Row 2:")


def test_errors_are_collected_for_every_row():
    rows = parse_csv(_csv(
        "Rosa Diaz,81,single,1,0,12 Pine Rd,doorstep",
        ",abc,couple,-1,x,,drone",
    ))
    errors = validate_rows(rows)
    assert errors == [
        "Row 3: Name is required",
        "Row 3: Age must be a valid number between 0 and 120",
        "Row 3: Address is required",
        "Row 3: Family adults must be a valid number",
        "Row 3: Family children must be a valid number",
        "Row 3: Household type must be 'single' or 'family'",
        "Row 3: Delivery method must be 'doorstep', 'phone_confirmed', or 'family_member'",
    ]


def test_headers_are_case_insensitive_and_aliased():
    text = "Full Name,AGE,Adults,Children,Address,Phone Number,Language\nLi Wei,77,2,1,8 Oak St,555-0100,Mandarin\n"
    row = parse_csv(text)[0]
    assert row["name"] == "Li Wei"
    assert row["family_adults"] == "2"
    assert row["family_children"] == "1"
    assert row["phone"] == "555-0100"
    assert row["preferred_language"] == "Mandarin"
    assert row["household_type"] == "single"
    assert row["delivery_method"] == "doorstep"
    assert validate_rows([row]) == []


def test_quoted_fields_and_blank_lines():
    text = 'name,age,address\n"Diaz, Rosa",81,"12 Pine Rd, Apt 3"\n\n'
    rows = parse_csv(text)
    assert len(rows) == 1
    assert rows[0]["name"] == "Diaz, Rosa"
    assert rows[0]["address"] == "12 Pine Rd, Apt 3"


def test_header_only_is_rejected():
    with pytest.raises(CsvFormatError):
        parse_csv(HEADER + "\n")


def test_template_parses_and_validates():
    rows = parse_csv(TEMPLATE_CSV)
    assert len(rows) == 2
    assert validate_rows(rows) == []


def test_import_of_25_rows_in_batches_of_10():
    store = FakeStore()
    result = SeniorImporter(store, batch_size=10).run(_valid_rows(25))

    assert (result.total, result.successful, result.failed, result.errors) == (25, 25, 0, [])
    assert [len(b) for b in store.batches] == [10, 10, 5]
    first = store.seniors[0]
    assert first["age"] == 60
    assert first["active"] is True
    assert first["has_smartphone"] is False


def test_failed_batch_is_isolated():
    store = FakeStore()
    store.fail_batches = {2}
    result = SeniorImporter(store, batch_size=10).run(_valid_rows(25))

    assert result.total == 25
    assert result.successful == 15
    assert result.failed == 10
    assert result.errors == ["Batch 2: insert rejected"]
    assert len(store.seniors) == 15


def test_validation_failure_writes_nothing():
    store = FakeStore()
    rows = _valid_rows(3) + parse_csv(_csv("Rosa Diaz,150,single,1,0,12 Pine Rd,doorstep"))
    with pytest.raises(CsvValidationError) as exc_info:
        SeniorImporter(store).run(rows)

    assert exc_info.value.errors == ["Row 5: Age must be a valid number between 0 and 120"]
    assert store.batches == []


def test_boolean_and_language_normalisation():
    text = "name,age,address,smartphone,translation,language,delivery_method\nAl,80,1 A St,TRUE,yes,Spanish,Phone_Confirmed\n"
    store = FakeStore()
    SeniorImporter(store).run(parse_csv(text))
    record = store.seniors[0]
    assert record["has_smartphone"] is True
    assert record["needs_translation"] is True
    assert record["preferred_language"] == "spanish"
    assert record["delivery_method"] == "phone_confirmed"


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        SeniorImporter(FakeStore(), batch_size=0)


def test_spreadsheet_style_decimal_numbers_are_accepted():
    rows = parse_csv(_csv("Rosa Diaz,75.0,family,2.0,1,12 Pine Rd,doorstep"))
    assert validate_rows(rows) == []

    store = FakeStore()
    SeniorImporter(store).run(rows)
    record = store.seniors[0]
    assert (record["age"], record["family_adults"], record["family_children"]) == (75, 2, 1)


def test_non_finite_numbers_are_rejected():
    rows = parse_csv(_csv("Rosa Diaz,inf,single,nan,0,12 Pine Rd,doorstep"))
    assert validate_rows(rows) == [
        "Row 2: Age must be a valid number between 0 and 120",
        "Row 2: Family adults must be a valid number",
    ]
