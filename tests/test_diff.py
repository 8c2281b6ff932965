from callmanager.axl.diff import compute_update


class TestComputeUpdate:
    def test_changed_fields_and_directives(self):
        canonical = {"name": "Phone1", "description": "old", "devicePoolName": "DP_NYC"}
        desired = {"name": "Phone1", "description": "new", "addMembers": ["X"]}
        assert compute_update(canonical, desired, {"name": "Phone1"}) == {
            "name": "Phone1",
            "description": "new",
            "addMembers": ["X"],
        }

    def test_nothing_changed(self):
        canonical = {"name": "Css1", "description": "same"}
        assert compute_update(canonical, dict(canonical), {"name": "Css1"}) == {
            "name": "Css1"
        }

    def test_search_key_always_sent(self):
        assert compute_update({}, {}, {"uuid": "{U1}"}) == {"uuid": "{U1}"}
        key = {"pattern": "1000", "routePartitionName": "PT_NYC"}
        assert compute_update({"pattern": "1000"}, {"pattern": "2000"}, key) == key

    def test_fields_not_on_object_ignored(self):
        canonical = {"name": "DP_NYC"}
        desired = {"name": "DP_NYC", "notARealField": "x"}
        assert compute_update(canonical, desired, {"name": "DP_NYC"}) == {"name": "DP_NYC"}

    def test_none_means_leave_alone(self):
        canonical = {"name": "R1", "description": "keep"}
        desired = {"name": "R1", "description": None}
        assert compute_update(canonical, desired, {"name": "R1"}) == {"name": "R1"}

    def test_structural_comparison(self):
        canonical = {"name": "MRL1", "members": {"member": [{"order": 0}]}}
        same = {"name": "MRL1", "members": {"member": [{"order": 0}]}}
        changed = {"name": "MRL1", "members": {"member": [{"order": 1}]}}
        assert "members" not in compute_update(canonical, same, {"name": "MRL1"})
        assert compute_update(canonical, changed, {"name": "MRL1"})["members"] == {
            "member": [{"order": 1}]
        }

    def test_reference_compared_by_name(self):
        canonical = {
            "name": "P1",
            "devicePoolName": {"_value_1": "DP_NYC", "uuid": "{DP}"},
            "locationName": {"_value_1": "LOC_NYC", "uuid": "{LOC}"},
        }
        desired = {"name": "P1", "devicePoolName": "DP_NYC", "locationName": "LOC_BOS"}
        assert compute_update(canonical, desired, {"name": "P1"}) == {
            "name": "P1",
            "locationName": "LOC_BOS",
        }

    def test_every_directive_and_diff_together(self):
        # directives never hide a changed field, wherever it sits on the object
        canonical = {"name": "Css1", "description": "a", "partitionUsage": "General"}
        desired = {
            "name": "Css1",
            "addMembers": {"member": [{"routePartitionName": "PT_A", "index": 1}]},
            "removeMembers": {"member": [{"routePartitionName": "PT_B", "index": 2}]},
            "newName": "Css2",
            "partitionUsage": "Intercom",
        }
        result = compute_update(canonical, desired, {"name": "Css1"})
        assert result["partitionUsage"] == "Intercom"
        assert result["addMembers"] == desired["addMembers"]
        assert result["removeMembers"] == desired["removeMembers"]
        assert result["newName"] == "Css2"
        assert "description" not in result

    def test_directives_with_empty_object(self):
        assert compute_update({}, {"newName": "B"}, {"name": "A"}) == {
            "name": "A",
            "newName": "B",
        }

    def test_desired_not_mutated_through_result(self):
        desired = {"name": "A", "addMembers": {"member": [1]}}
        result = compute_update({"name": "A"}, desired, {"name": "A"})
        result["addMembers"]["member"].append(2)
        assert desired["addMembers"] == {"member": [1]}
