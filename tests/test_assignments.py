import json

import pytest

from tourguide.errors import CapacityExhaustedError, DelegateError
from tourguide.tours.assignments import (
    FALLBACK_REASONING,
    assign_by_capacity,
    assignments_from_configuration,
    generate_vehicle_assignments,
)
from tourguide.tours.models import AssignmentRequest, Participant, VehicleOption


def people(n):
    return [Participant(name=f"P{i + 1}") for i in range(n)]


def fleet(*capacities):
    types = ["suv_4wd", "minivan", "sedan", "marshrutka"]
    return [VehicleOption(type=types[i % len(types)], capacity=c) for i, c in enumerate(capacities)]


def seats(assignments):
    return [(a.vehicle_index, a.seat_number) for a in assignments]


# ---------- Remplissage glouton ----------

def test_fill_exactly_exhausts_capacity_in_order():
    result = assign_by_capacity(people(5), fleet(2, 3))

    assert seats(result) == [(0, 1), (0, 2), (1, 1), (1, 2), (1, 3)]
    assert [a.participant_name for a in result] == ["P1", "P2", "P3", "P4", "P5"]
    assert [a.vehicle_type for a in result] == ["suv_4wd"] * 2 + ["minivan"] * 3


def test_overflow_goes_to_unknown_vehicle():
    result = assign_by_capacity(people(7), fleet(2, 3))

    assert seats(result)[5:] == [(2, 1), (2, 2)]
    assert [a.vehicle_type for a in result[5:]] == ["Unknown", "Unknown"]


def test_overflow_vehicle_is_not_bounded():
    result = assign_by_capacity(people(12), fleet(1))

    assert seats(result)[-1] == (1, 11)
    assert {a.vehicle_index for a in result[1:]} == {1}


def test_no_vehicles_puts_everyone_in_overflow():
    result = assign_by_capacity(people(3), [])

    assert seats(result) == [(0, 1), (0, 2), (0, 3)]
    assert all(a.vehicle_type == "Unknown" for a in result)


def test_no_participants_gives_no_assignment():
    assert assign_by_capacity([], fleet(4)) == []


def test_strict_mode_refuses_overflow():
    with pytest.raises(CapacityExhaustedError) as exc:
        assign_by_capacity(people(6), fleet(2, 3), strict=True)
    assert exc.value.participants == 6
    assert exc.value.capacity == 5


def test_strict_mode_accepts_exact_capacity():
    result = assign_by_capacity(people(5), fleet(2, 3), strict=True)
    assert len(result) == 5


# ---------- Affectation via le LLM ----------

def make_request(n=3, capacities=(2, 2), strict=False):
    return AssignmentRequest(
        participants=people(n),
        vehicles=fleet(*capacities),
        destinations=["Karakol", "Song-Kul"],
        strict=strict,
    )


def test_generative_assignment_is_used_when_complete(make_delegate):
    answer = json.dumps(
        {
            "assignments": [
                {"participantName": "P1", "vehicleIndex": 1, "vehicleType": "minivan", "seatAssignment": 1},
                {"participant_name": "P2", "vehicle_index": 0, "vehicle_type": "suv_4wd", "seat_number": 1},
                {"participant_name": "P3", "vehicle_index": 0, "vehicle_type": "suv_4wd", "seat_number": 2},
            ],
            "reasoning": "P1 needs the sliding door",
        }
    )
    delegate = make_delegate(responses=[answer])

    plan = generate_vehicle_assignments(make_request(), delegate)

    assert plan.source == "generative"
    assert plan.reasoning == "P1 needs the sliding door"
    assert seats(plan.assignments) == [(1, 1), (0, 1), (0, 2)]
    assert "Karakol, Song-Kul" in delegate.calls[0]["prompt"]


def test_generative_assignment_without_reasoning_gets_default(make_delegate):
    answer = json.dumps(
        {
            "assignments": [
                {"participant_name": "P1", "vehicle_index": 0, "vehicle_type": "suv_4wd", "seat_number": 1}
            ]
        }
    )
    plan = generate_vehicle_assignments(make_request(n=1), make_delegate(responses=[answer]))

    assert plan.source == "generative"
    assert plan.reasoning == "Standard assignment based on capacity"


@pytest.mark.parametrize(
    "answer",
    [
        "Put everyone in the big van, it is fine.",
        json.dumps({"assignments": []}),
        json.dumps({"assignments": [{"participant_name": "P1", "vehicle_index": 0, "vehicle_type": "x", "seat_number": 1}]}),
        json.dumps({"assignments": [{"participant_name": "P1"}]}),
        json.dumps({"assignments": "P1 -> van"}),
        json.dumps([1, 2, 3]),
    ],
)
def test_unusable_generative_answer_falls_back(make_delegate, answer):
    plan = generate_vehicle_assignments(make_request(), make_delegate(responses=[answer]))

    assert plan.source == "fallback"
    assert plan.reasoning == FALLBACK_REASONING
    assert seats(plan.assignments) == [(0, 1), (0, 2), (1, 1)]


def seat(name, vehicle_index, seat_number):
    return {"participant_name": name, "vehicle_index": vehicle_index, "vehicle_type": "sedan", "seat_number": seat_number}


@pytest.mark.parametrize(
    "assignments",
    [
        # véhicule inexistant
        [seat("P1", 7, 1), seat("P2", 7, 1), seat("P3", 7, 1)],
        # siège au-delà de la capacité
        [seat("P1", 0, 1), seat("P2", 0, 2), seat("P3", 0, 3)],
        # même siège deux fois
        [seat("P1", 0, 1), seat("P2", 0, 1), seat("P3", 1, 1)],
        # un participant deux fois, un autre oublié
        [seat("P1", 0, 1), seat("P1", 0, 2), seat("P2", 1, 1)],
    ],
)
def test_infeasible_generative_plan_falls_back(make_delegate, assignments):
    answer = json.dumps({"assignments": assignments, "reasoning": "trust me"})

    plan = generate_vehicle_assignments(make_request(), make_delegate(responses=[answer]))

    assert plan.source == "fallback"
    assert seats(plan.assignments) == [(0, 1), (0, 2), (1, 1)]


def test_homonyms_must_all_be_seated(make_delegate):
    request = AssignmentRequest(
        participants=[Participant(name="Aibek"), Participant(name="Aibek")],
        vehicles=fleet(2),
    )
    answer = json.dumps({"assignments": [seat("Aibek", 0, 1), seat("Nurlan", 0, 2)]})

    plan = generate_vehicle_assignments(request, make_delegate(responses=[answer]))

    assert plan.source == "fallback"
    assert [a.participant_name for a in plan.assignments] == ["Aibek", "Aibek"]


def test_delegate_failure_falls_back(make_delegate):
    delegate = make_delegate(error=DelegateError("quota exceeded"))

    plan = generate_vehicle_assignments(make_request(), delegate)

    assert plan.source == "fallback"
    assert len(plan.assignments) == 3


def test_strict_request_fails_before_calling_the_model(make_delegate):
    delegate = make_delegate()
    with pytest.raises(CapacityExhaustedError):
        generate_vehicle_assignments(make_request(n=5, strict=True), delegate)
    assert delegate.calls == []


# ---------- Affectations d'un circuit ----------

def test_assignments_from_configuration(tour_config):
    result = assignments_from_configuration(tour_config)

    assert [a.vehicle_id for a in result] == ["vehicle-1", "vehicle-2"]
    assert [a.vehicle_type for a in result] == ["suv_4wd", "minivan"]
    assert [a.occupants for a in result] == [4, 2]
    assert result[0].route == "Bishkek -> issyk_kul"
    assert result[0].driver_notes == "Driver included"
    assert result[1].driver_notes is None
