import json
from django.test import TestCase
from django.urls import reverse

from .models import FoodDonation


class SaveFoodEndpointTests(TestCase):
    def _post(self, payload, raw=None):
        return self.client.post(
            reverse('donations:save_food'),
            data=raw if raw is not None else json.dumps(payload),
            content_type='application/json',
        )

    def test_valid_payload_is_saved(self):
        resp = self._post({'description': 'Bread', 'quantity': '10 loaves', 'location': 'Bakery on 5th'})
        self.assertEqual(resp.status_code, 201)
        donation = FoodDonation.objects.get()
        self.assertEqual(resp.json(), {'message': 'Food donation saved', 'id': donation.pk})
        self.assertEqual(donation.description, 'Bread')
        self.assertEqual(donation.quantity, '10 loaves')
        self.assertEqual(donation.location, 'Bakery on 5th')

    def test_path_matches_page_default(self):
        self.assertEqual(reverse('donations:save_food'), '/api/save-food')

    def test_missing_fields_are_reported(self):
        resp = self._post({'description': 'Bread', 'quantity': '  '})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {'message': 'Missing fields: quantity, location'})
        self.assertFalse(FoodDonation.objects.exists())

    def test_invalid_json_is_rejected(self):
        resp = self._post(None, raw='{not json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['message'], 'Invalid JSON body')

    def test_non_object_body_is_rejected(self):
        resp = self._post(['Bread', '10 loaves', 'Bakery'])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['message'], 'Invalid JSON body')

    def test_overlong_quantity_is_rejected_with_message(self):
        resp = self._post({'description': 'Bread', 'quantity': 'x' * 300, 'location': 'Bakery'})
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(resp.json()['message'].startswith('quantity: '))
        self.assertFalse(FoodDonation.objects.exists())

    def test_get_is_not_allowed(self):
        resp = self.client.get(reverse('donations:save_food'))
        self.assertEqual(resp.status_code, 405)

    def test_extra_fields_are_ignored(self):
        resp = self._post({'description': 'Soup', 'quantity': '3 l', 'location': 'Hall', 'image': 'x.png'})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(FoodDonation.objects.count(), 1)
