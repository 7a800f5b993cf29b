# test_plan_generator.py
# Checks the weekly schedule rules: volume progression, day layouts and distance bands.

import json

import pytest

from training_plans import InputShapeError, PlanGenerator, PlanInput
from training_plans.models import WEEKDAYS, Fitness, schedule_to_dict
from training_plans.plan_generator import training_phase, weekly_distance


def make_input(level='intermediate', weekly=25, days=('tuesday', 'thursday', 'saturday', 'sunday'),
               weeks=12, goal='race_prep', race_type='10k'):
    return PlanInput.from_dict({
        'goal': {'type': goal, 'raceType': race_type},
        'fitness': {'currentLevel': level, 'weeklyDistanceKm': weekly, 'longestRunKm': 10,
                    'experience': 'regular'},
        'preferences': {'daysPerWeek': len(days), 'preferredDays': list(days),
                        'timeAvailable': '60min', 'location': 'outdoor', 'adaptToPace': True},
        'schedule': {'durationWeeks': weeks, 'startDate': '2025-01-27'},
    })


def km(session):
    return int(session.distance.rstrip('km'))


def test_race_prep_week_one():
    schedule = PlanGenerator().generate(make_input())
    week = schedule[1]

    assert week.total_distance == '25km'
    assert week.focus == 'Base Building'
    assert week.days['tuesday'].type == 'recovery_run'
    assert week.days['thursday'].type == 'track_work'
    assert week.days['saturday'].type == 'tempo_run'
    assert week.days['sunday'].type == 'long_run'
    for day in ('monday', 'wednesday', 'friday'):
        assert week.days[day].type == 'rest'


def test_four_day_distances_week_one():
    week = PlanGenerator().generate(make_input())[1]

    assert week.days['tuesday'].distance == '4km'
    assert week.days['thursday'].distance == '6km'
    assert week.days['saturday'].distance == '8km'
    # 35% of 25km is 9km, lifted to the 12km floor
    assert week.days['sunday'].distance == '12km'


def test_every_week_has_seven_days():
    schedule = PlanGenerator().generate(make_input(weeks=9))

    assert sorted(schedule) == list(range(1, 10))
    for week in schedule.values():
        assert list(week.days) == list(WEEKDAYS)
        assert all(not session.completed for session in week.days.values())


def test_generate_is_deterministic():
    plan_input = make_input(level='advanced', weekly=70,
                            days=('monday', 'tuesday', 'thursday', 'saturday', 'sunday'))
    first = schedule_to_dict(PlanGenerator().generate(plan_input))
    second = schedule_to_dict(PlanGenerator().generate(plan_input))

    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_weekly_distance_progression():
    fitness = Fitness(current_level='intermediate', weekly_distance_km=25)
    distances = [weekly_distance(fitness, week) for week in range(1, 13)]

    assert distances[:6] == [25, 28, 30, 33, 35, 38]
    assert distances == sorted(distances)
    # +50% is the most the plan ever adds
    assert max(distances) == 38


def test_weekly_distance_level_caps():
    assert weekly_distance(Fitness(current_level='beginner', weekly_distance_km=100), 1) == 20
    assert weekly_distance(Fitness(current_level='advanced', weekly_distance_km=80), 1) == 60
    assert weekly_distance(Fitness(current_level='advanced', weekly_distance_km=80), 6) == 85
    assert weekly_distance(Fitness(current_level='beginner', weekly_distance_km=0), 4) == 0


@pytest.mark.parametrize('weekly', [0, 5, 12, 30, 80, 200])
@pytest.mark.parametrize('level', ['beginner', 'intermediate', 'advanced'])
def test_three_day_bands(level, weekly):
    days = ('monday', 'wednesday', 'saturday')
    schedule = PlanGenerator().generate(make_input(level=level, weekly=weekly, days=days, weeks=10))

    for week in schedule.values():
        assert 3 <= km(week.days['monday']) <= 8
        assert 5 <= km(week.days['wednesday']) <= 10
        assert 8 <= km(week.days['saturday']) <= 16
        assert week.days['monday'].type == 'easy_run'
        assert week.days['wednesday'].type == 'tempo_run'
        assert week.days['saturday'].type == 'long_run'


def test_five_day_plan_alternates_fartlek_and_hills():
    days = ('monday', 'tuesday', 'thursday', 'saturday', 'sunday')
    schedule = PlanGenerator().generate(make_input(level='advanced', weekly=60, days=days, weeks=4))

    assert schedule[1].days['thursday'].type == 'fartlek'
    assert schedule[2].days['thursday'].type == 'hills'
    assert schedule[2].days['thursday'].name == 'Kenyan Hills'
    assert schedule[3].days['thursday'].type == 'fartlek'

    week = schedule[1]
    assert [week.days[day].distance for day in days] == ['5km', '10km', '10km', '15km', '16km']
    assert week.days['wednesday'].type == 'rest'
    assert week.days['friday'].type == 'rest'


def test_track_work_follows_level_and_phase():
    days = ('monday', 'wednesday', 'friday', 'sunday')
    beginner = PlanGenerator().generate(make_input(level='beginner', days=days, weeks=12))
    advanced = PlanGenerator().generate(make_input(level='advanced', days=days, weeks=12))

    assert beginner[1].days['wednesday'].description.startswith('4 x 400m with 200m walk recovery')
    assert beginner[1].days['wednesday'].name == 'Aerobic Intervals'
    assert advanced[12].days['wednesday'].description.startswith('3 x 1600m with 600m recovery')
    assert advanced[12].days['wednesday'].pace == 'Race pace'


def test_focus_labels_by_goal():
    generator = PlanGenerator()
    race = generator.generate(make_input(goal='race_prep'))
    weight = generator.generate(make_input(goal='weight_loss'))
    general = generator.generate(make_input(goal='general_fitness'))

    assert [race[w].focus for w in (1, 6, 12)] == ['Base Building', 'Build Phase', 'Peak & Taper']
    assert [weight[w].focus for w in (1, 6, 12)] == ['Consistency Building', 'Fat Burning', 'Maintenance']
    assert {week.focus for week in general.values()} == {'General Fitness'}


def test_training_phase():
    assert [training_phase(w, 12) for w in (1, 3, 5, 7, 9, 12)] == [1, 1, 2, 2, 3, 3]
    assert training_phase(1, 1) == 3


def test_long_run_intensity_rises_in_second_half():
    schedule = PlanGenerator().generate(make_input(weeks=12))

    assert schedule[6].days['sunday'].intensity == 'low'
    assert schedule[7].days['sunday'].intensity == 'moderate'


def test_rest_day_serialisation():
    data = schedule_to_dict(PlanGenerator().generate(make_input(weeks=1)))

    assert data[1]['monday'] == {
        'type': 'rest',
        'name': 'Rest Day',
        'description': 'Complete rest or gentle yoga/stretching',
        'intensity': 'low',
        'completed': False,
    }
    assert data[1]['totalDistance'] == '25km'


@pytest.mark.parametrize('days_per_week, days', [
    (2, ['monday', 'friday']),
    (6, ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday']),
])
def test_unsupported_days_per_week(days_per_week, days):
    plan_input = make_input(days=days)
    with pytest.raises(InputShapeError):
        PlanGenerator().generate(plan_input)


def test_preferred_days_must_match_count():
    plan_input = PlanInput.from_dict({
        'preferences': {'daysPerWeek': 4, 'preferredDays': ['monday', 'tuesday', 'friday']},
        'schedule': {'durationWeeks': 4, 'startDate': '2025-01-27'},
    })
    with pytest.raises(InputShapeError):
        PlanGenerator().generate(plan_input)


def test_bad_weekday_names():
    with pytest.raises(InputShapeError):
        PlanGenerator().generate(make_input(days=('monday', 'funday', 'friday')))
    with pytest.raises(InputShapeError):
        PlanGenerator().generate(make_input(days=('monday', 'monday', 'friday')))


def test_from_dict_defaults():
    plan_input = PlanInput.from_dict({'schedule': {'startDate': '2025-03-03'}})

    assert plan_input.goal.type == 'general_fitness'
    assert plan_input.fitness.current_level == 'beginner'
    assert plan_input.fitness.weekly_distance_km == 10
    assert plan_input.preferences.days_per_week == 3
    assert plan_input.preferences.preferred_days == ('tuesday', 'thursday', 'saturday')
    assert plan_input.schedule.duration_weeks == 12


def test_plan_names():
    generator = PlanGenerator()

    assert generator.plan_name(make_input(race_type='half_marathon')) == 'Half Marathon Training Plan (12 weeks)'
    assert generator.plan_name(make_input(goal='weight_loss', weeks=8)) == 'Weight Loss Running Plan (8 weeks)'
    assert generator.plan_name(make_input(goal='general_fitness')) == 'Custom Training Plan (12 weeks)'


def test_build_plan_record():
    record = PlanGenerator().build_plan_record(make_input(), plan_id=7, user_id='runner_42')

    assert record['planName'] == '10K Race Training Plan (12 weeks)'
    assert record['planType'] == '10k'
    assert record['startDate'] == '2025-01-27'
    assert record['endDate'] == '2025-04-21'
    assert record['preferences']['restDays'] == ['monday', 'wednesday', 'friday']
    assert record['preferences']['maxDistancePerWeek'] == 50
    assert sorted(record['weeklySchedule'], key=int) == [str(w) for w in range(1, 13)]
    # record must survive a JSON round trip unchanged
    assert json.loads(json.dumps(record)) == record


def test_zero_days_per_week_is_rejected():
    plan_input = PlanInput.from_dict({
        'preferences': {'daysPerWeek': 0, 'preferredDays': ['monday']},
        'schedule': {'durationWeeks': 4, 'startDate': '2025-01-27'},
    })

    assert plan_input.preferences.days_per_week == 0
    with pytest.raises(InputShapeError):
        PlanGenerator().generate(plan_input)
