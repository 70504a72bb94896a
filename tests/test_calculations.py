import datetime

import numpy as np
import pandas as pd
import pytest

from transformation.calculations import (
    assign_rank,
    elapsed_minutes,
    growth_pct,
    month_label,
    one_year_before,
    parse_time_of_day,
    previous_value,
    season,
    star_rating,
    time_slot,
    time_slot_label,
    to_clock_time,
)


def times(*values):
    return pd.to_timedelta(pd.Series([parse_time_of_day(v) for v in values]))


class TestParseTimeOfDay:
    def test_accepts_strings_with_and_without_seconds(self):
        assert parse_time_of_day('23:50') == pd.Timedelta(hours=23, minutes=50)
        assert parse_time_of_day('07:05:30') == pd.Timedelta(hours=7, minutes=5, seconds=30)

    def test_accepts_time_and_datetime_objects(self):
        assert parse_time_of_day(datetime.time(0, 10)) == pd.Timedelta(minutes=10)
        assert parse_time_of_day(datetime.datetime(2024, 1, 1, 18, 30)) == pd.Timedelta(hours=18, minutes=30)
        assert parse_time_of_day(datetime.timedelta(hours=1)) == pd.Timedelta(hours=1)

    def test_missing_values_become_nat(self):
        assert parse_time_of_day(None) is pd.NaT
        assert parse_time_of_day(float('nan')) is pd.NaT

    @pytest.mark.parametrize('value', ['25:00', '12:61', 'noon', '12', datetime.timedelta(days=1)])
    def test_rejects_malformed_values(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)

    def test_clock_time_round_trip(self):
        assert to_clock_time(parse_time_of_day('21:10:05')) == datetime.time(21, 10, 5)
        assert to_clock_time(pd.NaT) is None


class TestElapsedMinutes:
    def test_same_day(self):
        assert elapsed_minutes(times('12:15'), times('12:40')).tolist() == [25.0]

    def test_delivery_after_midnight_adds_a_day(self):
        assert elapsed_minutes(times('23:50'), times('00:10')).tolist() == [20.0]

    def test_missing_delivery_time_stays_missing(self):
        assert elapsed_minutes(times('10:00'), times(None)).isna().all()


class TestTimeSlots:
    def test_day_splits_into_twelve_exhaustive_buckets(self):
        buckets = {hour: time_slot(hour) for hour in range(24)}

        assert len(set(buckets.values())) == 12
        for hour, (start, end) in buckets.items():
            assert start <= hour < end
            assert end - start == 2

    def test_buckets_do_not_overlap(self):
        starts = sorted({time_slot(hour)[0] for hour in range(24)})
        assert starts == list(range(0, 24, 2))

    def test_end_hour_is_exclusive(self):
        assert time_slot(1) == (0, 2)
        assert time_slot(2) == (2, 4)
        assert time_slot(23) == (22, 24)

    @pytest.mark.parametrize('hour', [-1, 24])
    def test_rejects_out_of_range_hours(self, hour):
        with pytest.raises(ValueError):
            time_slot(hour)

    def test_labels(self):
        assert time_slot_label(0) == '00:00 - 02:00'
        assert time_slot_label(22) == '22:00 - 00:00'


class TestSeason:
    @pytest.mark.parametrize('month, expected', [
        (3, 'Spring'), (5, 'Spring'), (6, 'Summer'), (8, 'Summer'),
        (9, 'Autumn'), (11, 'Autumn'), (12, 'Winter'), (1, 'Winter'), (2, 'Winter'),
    ])
    def test_northern_hemisphere_mapping(self, month, expected):
        assert season(month) == expected

    def test_every_month_has_a_season(self):
        assert {season(month) for month in range(1, 13)} == {'Spring', 'Summer', 'Autumn', 'Winter'}

    def test_rejects_invalid_month(self):
        with pytest.raises(ValueError):
            season(13)


class TestStarRating:
    @pytest.mark.parametrize('minutes, expected', [
        (0, '5 star'), (14.99, '5 star'), (15, '4 star'), (20, '4 star'), (20.01, '3 star'), (45, '3 star'),
    ])
    def test_boundaries(self, minutes, expected):
        assert star_rating(minutes) == expected


class TestRanking:
    def setup_method(self):
        self.df = pd.DataFrame({
            'city': ['A', 'A', 'A', 'A', 'B', 'B'],
            'revenue': [100, 100, 80, 50, 10, 20],
        })

    def test_dense_rank_has_no_gaps(self):
        ranked = assign_rank(self.df[self.df['city'] == 'A'], 'revenue', method='dense')
        assert ranked['rank'].tolist() == [1, 1, 2, 3]

    def test_competition_rank_skips_after_ties(self):
        ranked = assign_rank(self.df[self.df['city'] == 'A'], 'revenue', method='min')
        assert ranked['rank'].tolist() == [1, 1, 3, 4]

    def test_rank_within_partitions(self):
        ranked = assign_rank(self.df, 'revenue', by='city', method='min')
        assert ranked['rank'].tolist() == [1, 1, 3, 4, 2, 1]

    def test_does_not_modify_input(self):
        assign_rank(self.df, 'revenue')
        assert 'rank' not in self.df.columns

    def test_rejects_unknown_method(self):
        with pytest.raises(ValueError):
            assign_rank(self.df, 'revenue', method='first')


class TestMonthOverMonth:
    def test_previous_value_defaults_to_zero(self):
        assert previous_value(pd.Series([5, 7, 3])).tolist() == [0, 5, 7]

    def test_previous_value_restarts_per_partition(self):
        values = pd.Series([1, 2, 10, 20])
        groups = pd.Series(['x', 'x', 'y', 'y'])
        assert previous_value(values, by=groups).tolist() == [0, 1, 0, 10]

    def test_growth_is_undefined_when_prior_is_zero(self):
        growth = growth_pct(pd.Series([120.0, 200.0, 0.0, 450.0]), pd.Series([0.0, 120.0, 200.0, 0.0]))

        assert np.isnan(growth[0])
        assert growth[1] == 66.67
        assert growth[2] == -100.0
        assert np.isnan(growth[3])

    def test_month_label_sorts_chronologically(self):
        dates = pd.to_datetime(pd.Series(['2024-01-15', '2023-12-01', '2023-02-28']))
        assert sorted(month_label(dates).tolist()) == ['2023-02', '2023-12', '2024-01']


def test_one_year_before():
    assert one_year_before('2024-06-30') == pd.Timestamp('2023-06-30')
    assert one_year_before(datetime.date(2024, 2, 29)) == pd.Timestamp('2023-02-28')
