"""
Tests for the movie store: lookups, create/update/delete, persistence and rollback.
"""

import threading

import pytest

from conftest import RecordingRepository, movie_dict
from movie_catalog.catalog import MovieCatalog
from movie_catalog.errors import MovieNotFoundError, PersistenceFailure, ValidationError
from movie_catalog.filters import parse_filter
from movie_catalog.store import MovieStore


def test_load_populates_records(store):
	assert len(store) == 2
	assert store.find_by_id(2).title == 'Whiplash'


def test_load_failure_propagates():
	class BrokenRepository(RecordingRepository):
		def load_all(self):
			raise PersistenceFailure('unreadable')

	with pytest.raises(PersistenceFailure):
		MovieStore(BrokenRepository()).load()


def test_find_by_id_absent_returns_none(store):
	assert store.find_by_id(999) is None


def test_create_appends_and_persists(store, repository):
	result = store.create(movie_dict(title='New'))

	assert result is None
	assert len(store) == 3
	created = store.snapshot()[-1]
	assert created.title == 'New'
	assert len(repository.saves) == 1
	assert repository.saves[0][-1] == created


def test_create_ignores_supplied_id(store):
	store.create(movie_dict(id=1, title='Impostor'))

	assert store.find_by_id(1).title == 'La La Land'
	assert store.snapshot()[-1].id not in (1, 2)


def test_create_ids_are_unique_and_increasing(store, monkeypatch):
	monkeypatch.setattr('movie_catalog.store.time.time', lambda: 1000.0)
	store.create(movie_dict(title='First'))
	store.create(movie_dict(title='Second'))

	first, second = store.snapshot()[-2:]
	assert first.id == 1000000
	assert second.id == 1000001


def test_create_invalid_url_raises_validation_error_without_write(store, repository):
	with pytest.raises(ValidationError) as exc:
		store.create(movie_dict(title='New', poster_path='not-a-url'))

	assert [e['field'] for e in exc.value.errors] == ['poster_path']
	assert len(store) == 2
	assert repository.saves == []


def test_create_missing_fields_reports_each_field(store):
	with pytest.raises(ValidationError) as exc:
		store.create({'title': 'Only a title'})

	fields = {e['field'] for e in exc.value.errors}
	assert fields == {'release_date', 'poster_path', 'overview', 'runtime', 'genres'}


def test_update_merges_shallowly(store, repository):
	before = store.find_by_id(1)
	updated = store.update(1, {'title': 'X'})

	assert updated.title == 'X'
	assert updated.genres == before.genres
	assert updated.runtime == before.runtime
	assert updated.poster_path == before.poster_path
	assert store.find_by_id(1) == updated
	assert repository.saves[-1][0] == updated


def test_update_never_changes_id(store):
	updated = store.update(1, {'id': 42, 'title': 'X', 'unknown': 'dropped'})

	assert updated.id == 1
	assert store.find_by_id(42) is None
	assert not hasattr(updated, 'unknown')


def test_update_unknown_id_raises_not_found(store, repository):
	with pytest.raises(MovieNotFoundError) as exc:
		store.update(999, {'title': 'X'})

	assert exc.value.movie_id == 999
	assert repository.saves == []


def test_delete_returns_removed_record(store, repository):
	removed = store.delete(2)

	assert removed.title == 'Whiplash'
	assert store.find_by_id(2) is None
	assert [m.id for m in repository.saves[-1]] == [1]


def test_delete_absent_returns_none_without_write(store, repository):
	assert store.delete(999) is None
	assert repository.saves == []


def test_save_failure_rolls_back_create(store, repository):
	repository.fail_on_save = True

	with pytest.raises(PersistenceFailure):
		store.create(movie_dict(title='New'))
	assert len(store) == 2


def test_save_failure_rolls_back_update(store, repository):
	repository.fail_on_save = True

	with pytest.raises(PersistenceFailure):
		store.update(1, {'title': 'X'})
	assert store.find_by_id(1).title == 'La La Land'


def test_save_failure_rolls_back_delete(store, repository):
	repository.fail_on_save = True

	with pytest.raises(PersistenceFailure):
		store.delete(1)
	assert store.find_by_id(1) is not None


def test_os_error_on_save_is_wrapped(store, repository):
	def failing_save(movies):
		raise OSError('read-only file system')
	repository.save_all = failing_save

	with pytest.raises(PersistenceFailure) as exc:
		store.delete(1)
	assert isinstance(exc.value.__cause__, OSError)
	assert len(store) == 2


def test_snapshot_is_isolated_from_later_mutations(store):
	snap = store.snapshot()
	store.update(1, {'title': 'X'})
	store.delete(2)

	assert [m.title for m in snap] == ['La La Land', 'Whiplash']


def test_concurrent_creates_keep_ids_unique_and_persisted_state_current(store, repository):
	def worker(n):
		for i in range(20):
			store.create(movie_dict(title=f'w{n}-{i}'))

	threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()

	records = store.snapshot()
	assert len(records) == 82
	assert len({m.id for m in records}) == 82
	assert len(repository.saves) == 80
	assert repository.saves[-1] == list(records)


def test_catalog_find_all_after_delete(store):
	catalog = MovieCatalog(store)
	catalog.delete(1)

	page = catalog.find_all(parse_filter(search_by='genres', search='drama'))
	assert [m.id for m in page.data] == [2]
	assert catalog.find_one(1) is None


@pytest.mark.parametrize('patch, field', [
	({'title': None}, 'title'),
	({'genres': None}, 'genres'),
	({'runtime': 'long'}, 'runtime'),
	({'poster_path': 'not-a-url'}, 'poster_path'),
])
def test_update_rejects_invalid_required_fields_without_write(store, repository, patch, field):
	with pytest.raises(ValidationError) as exc:
		store.update(1, patch)

	assert [e['field'] for e in exc.value.errors] == [field]
	assert store.find_by_id(1).title == 'La La Land'
	assert store.find_by_id(1).genres == ['Drama', 'Comedy']
	assert repository.saves == []


def test_update_can_clear_optional_field(store):
	assert store.update(1, {'budget': None}).budget is None
