"""Describes the Fridgician domain. Centres around the `RecipeStore`.

What is actually in here?

- Recipes come from a large language model behind an api, and their photos
  from an image model behind the same api.
- The text call is all or nothing. The photos are best effort, one per recipe,
  all fired at once.
- Everything else is a single user poking at a list of records that lives in
  one key of local storage.

The only invariant worth the name is the collection one: ids are unique and
every change swaps exactly one record for an updated copy.
"""
