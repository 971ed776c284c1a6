"""
Tests for splitting multi-site cost estimates into per-site documents
"""
import pytest

from documents.site_grouping import (
    SINGLE_SITE,
    SiteSelectionError,
    group_estimates_by_page,
    group_line_items_by_site,
    is_rental_item,
    split_cost_estimate_by_site,
)


@pytest.mark.unit
class TestIsRentalItem:

    def test_static_and_led_rentals_are_anchors(self):
        assert is_rental_item({'category': 'Static Billboard Rental'})
        assert is_rental_item({'category': 'LED Billboard Rental'})

    def test_other_categories_are_not_anchors(self):
        assert not is_rental_item({'category': 'Production'})
        assert not is_rental_item({'category': None})
        assert not is_rental_item({})


@pytest.mark.unit
class TestGroupLineItemsBySite:

    def test_groups_keyed_by_rental_description_in_order(self, two_site_line_items):
        groups = group_line_items_by_site(two_site_line_items)
        assert list(groups.keys()) == ['EDSA Guadalupe', 'C5 Libis']

    def test_related_items_follow_their_anchor(self, two_site_line_items):
        groups = group_line_items_by_site(two_site_line_items)
        ids_a = [item['id'] for item in groups['EDSA Guadalupe']]
        ids_b = [item['id'] for item in groups['C5 Libis']]
        assert ids_a[:2] == ['site-a', 'site-a-production']
        assert ids_b[:2] == ['site-b', 'site-b-installation']

    def test_orphans_are_copied_into_every_group(self, two_site_line_items):
        groups = group_line_items_by_site(two_site_line_items)
        for items in groups.values():
            assert items[-1]['id'] == 'misc-1'
        # Copies, not shared references
        assert groups['EDSA Guadalupe'][-1] is not groups['C5 Libis'][-1]

    def test_every_item_lands_somewhere(self, two_site_line_items):
        groups = group_line_items_by_site(two_site_line_items)
        placed = {item['id'] for items in groups.values() for item in items}
        assert placed == {item['id'] for item in two_site_line_items}

    def test_no_anchors_gives_single_site(self):
        items = [
            {'id': 'item_1', 'description': 'Design', 'category': 'production_cost', 'total': 10},
            {'id': 'item_2', 'description': 'Setup', 'category': 'installation_cost', 'total': 20},
        ]
        groups = group_line_items_by_site(items)
        assert list(groups.keys()) == [SINGLE_SITE]
        assert groups[SINGLE_SITE] == items

    def test_empty_list(self):
        groups = group_line_items_by_site([])
        assert groups == {SINGLE_SITE: []}


@pytest.mark.unit
class TestSplitCostEstimateBySite:

    def _estimate(self, line_items):
        return {
            'id': 'ce-1',
            'cost_estimate_number': 'CE-20240101-1234',
            'title': 'Cost Estimate for two sites',
            'line_items': line_items,
            'tax_rate': 0.12,
        }

    def test_multi_site_numbers_get_letter_suffix(self, two_site_line_items):
        sites = split_cost_estimate_by_site(self._estimate(two_site_line_items))
        assert [s['cost_estimate_number'] for s in sites] == [
            'CE-20240101-1234-A', 'CE-20240101-1234-B'
        ]
        assert [s['title'] for s in sites] == ['EDSA Guadalupe', 'C5 Libis']

    def test_totals_recomputed_per_site(self, two_site_line_items):
        first = split_cost_estimate_by_site(self._estimate(two_site_line_items))[0]
        assert first['subtotal'] == pytest.approx(305000)
        assert first['tax_amount'] == pytest.approx(305000 * 0.12)
        assert first['total_amount'] == pytest.approx(305000 * 1.12)

    def test_single_site_keeps_number_and_title(self):
        items = [{'id': 's1', 'description': 'Ortigas', 'category': 'Static Billboard Rental',
                  'total': 1000}]
        sites = split_cost_estimate_by_site(self._estimate(items))
        assert len(sites) == 1
        assert sites[0]['cost_estimate_number'] == 'CE-20240101-1234'
        assert sites[0]['title'] == 'Cost Estimate for two sites'

    def test_selected_pages_filter_sites_but_keep_letters(self, two_site_line_items):
        sites = split_cost_estimate_by_site(self._estimate(two_site_line_items),
                                            selected_pages=['C5 Libis'])
        assert len(sites) == 1
        assert sites[0]['cost_estimate_number'].endswith('-B')

    def test_unmatched_selection_raises(self, two_site_line_items):
        with pytest.raises(SiteSelectionError):
            split_cost_estimate_by_site(self._estimate(two_site_line_items),
                                        selected_pages=['Nowhere'])

    def test_missing_tax_rate_defaults_to_vat(self):
        estimate = self._estimate([{'id': 'x', 'description': 'Design', 'category': 'Other',
                                    'total': 100}])
        estimate['tax_rate'] = None
        site = split_cost_estimate_by_site(estimate)[0]
        assert site['tax_amount'] == pytest.approx(12)

    def test_source_estimate_is_not_modified(self, two_site_line_items):
        estimate = self._estimate(two_site_line_items)
        split_cost_estimate_by_site(estimate)
        assert estimate['cost_estimate_number'] == 'CE-20240101-1234'
        assert len(estimate['line_items']) == 5


@pytest.mark.unit
class TestGroupEstimatesByPage:

    def test_siblings_sorted_by_page_number(self):
        estimates = [
            {'id': 'b', 'page_id': 'PAGE-1', 'page_number': 2},
            {'id': 'solo'},
            {'id': 'a', 'page_id': 'PAGE-1', 'page_number': 1},
        ]
        groups = group_estimates_by_page(estimates)
        assert list(groups.keys()) == ['PAGE-1', 'solo']
        assert [e['id'] for e in groups['PAGE-1']] == ['a', 'b']

    def test_missing_page_number_counts_as_one(self):
        estimates = [
            {'id': 'b', 'page_id': 'P', 'page_number': 2},
            {'id': 'a', 'page_id': 'P'},
        ]
        assert [e['id'] for e in group_estimates_by_page(estimates)['P']] == ['a', 'b']
