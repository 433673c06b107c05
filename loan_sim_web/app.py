import logging
import os
from http import HTTPStatus

from flask import Flask, jsonify, request

from loan_sim.engine import generate_amortisation, yearly_breakdown
from loan_sim.scenario import compare_mortgage_vs_personal_loan, generate_scenario_with_extras
from loan_sim.serializers import (
    extra_rules_from_list,
    loan_inputs_from_dict,
    result_to_dict,
    scenario_to_dict,
    split_comparison_to_dict,
    split_inputs_from_dict,
    yearly_to_list,
)
from loan_sim.validation import validate_inputs, validate_split_inputs

app = Flask(__name__)
app.config["PREVIEW_ROWS"] = int(os.environ.get("LOAN_SIM_PREVIEW_ROWS", "120"))
app.logger.setLevel(os.environ.get("LOAN_SIM_LOG_LEVEL", "INFO").upper())

# Parsing and validation failures; anything else is a server error
BAD_INPUT_ERRORS = (ValueError, TypeError, AttributeError)


def _bad_request(exc: Exception):
    app.logger.info("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST


def _inputs_from_payload(payload):
    inputs = loan_inputs_from_dict(payload)
    validate_inputs(inputs)
    return inputs


def _preview(result: dict, show_full_schedule: bool) -> dict:
    """Truncate the schedule unless the full schedule was requested."""
    if show_full_schedule:
        return result
    limit = app.config["PREVIEW_ROWS"]
    schedule = result["schedule"]
    if len(schedule) > limit:
        result["truncated"] = len(schedule) - limit
        result["schedule"] = schedule[:limit]
    return result


@app.get("/healthz")
def healthz():
    return jsonify({"status": "ok"})


@app.post("/api/amortisation")
def amortisation():
    payload = request.get_json(silent=True)
    try:
        inputs = _inputs_from_payload(payload)
    except BAD_INPUT_ERRORS as exc:
        return _bad_request(exc)
    result = result_to_dict(generate_amortisation(inputs))
    return jsonify(_preview(result, request.args.get("full") == "1")), HTTPStatus.OK


@app.post("/api/amortisation/yearly")
def amortisation_yearly():
    payload = request.get_json(silent=True)
    try:
        inputs = _inputs_from_payload(payload)
    except BAD_INPUT_ERRORS as exc:
        return _bad_request(exc)
    schedule = generate_amortisation(inputs).schedule
    return jsonify(yearly_to_list(yearly_breakdown(schedule))), HTTPStatus.OK


@app.post("/api/scenario")
def scenario():
    """Return the baseline and with-extras runs and what the extras save."""
    payload = request.get_json(silent=True) or {}
    try:
        inputs = _inputs_from_payload(payload.get("inputs"))
        rules = extra_rules_from_list(payload.get("extraRules"))
    except BAD_INPUT_ERRORS as exc:
        return _bad_request(exc)
    result = generate_scenario_with_extras(inputs, rules)
    app.logger.debug(
        "Scenario with %d rules saves %.2f interest", len(rules), result.comparison.interest_saved
    )
    return jsonify(scenario_to_dict(result)), HTTPStatus.OK


@app.post("/api/compare/split-loan")
def split_loan():
    """Compare one full mortgage with a smaller mortgage plus a personal loan."""
    payload = request.get_json(silent=True)
    try:
        inputs = split_inputs_from_dict(payload)
        validate_split_inputs(inputs)
    except BAD_INPUT_ERRORS as exc:
        return _bad_request(exc)
    comparison = compare_mortgage_vs_personal_loan(inputs)
    return jsonify(split_comparison_to_dict(comparison)), HTTPStatus.OK


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting Loan Simulator API...")
    app.run(port=int(os.environ.get("PORT", "5000")))
