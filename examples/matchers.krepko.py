"""Matcher walkthrough against JSONPlaceholder.

    krepko run --pattern 'examples/*.krepko.py' --tags matchers
"""

from krepko import expect, krepko

BASE_URL = 'https://jsonplaceholder.typicode.com'

USER = {
    'id': expect.number,
    'name': expect.string,
    'address': {
        'street': expect.string,
        'city': expect.string,
        'geo': {
            'lat': expect.string,
            'lng': expect.string,
        },
    },
}


async def type_matchers(ctx):
    response = await ctx.get('/posts/1')
    response.expect_status(200).expect_body({
        'id': expect.number,
        'userId': expect.any,
        'title': expect.string,
    })


async def exact_values(ctx):
    response = await ctx.get('/users/1')
    response.expect_status(200).expect_body({
        'id': 1,
        'username': 'Bret',
        'address': {'city': 'Gwenborough'},
    })


async def first_elements(ctx):
    response = await ctx.get('/posts')
    response.expect_status(200).expect_body([
        {'id': 1},
        {'id': 2},
    ])


async def every_element(ctx):
    response = await ctx.get('/users')
    response.expect_status(200).expect_body(expect.array_of(USER))


async def some_elements(ctx):
    response = await ctx.get('/users')
    response.expect_status(200).expect_body(expect.array_containing([
        {'id': 1, 'username': 'Bret'},
        {'id': 2, 'username': 'Antonette'},
    ]))


async def top_level_only(ctx):
    response = await ctx.get('/users/1')
    response.expect_status(200).expect_body({
        'id': expect.number,
        'address': expect.object,
        'company': expect.object,
    }, depth=1)


async def comments_of_post(ctx):
    post = await ctx.get('/posts/1')
    post.expect_status(200)

    ctx.set('post_id', post.body['id'])

    comments = await ctx.get(f'/posts/{ctx.get_var("post_id")}/comments')
    comments.expect_status(200).expect_body(expect.array_of({
        'postId': ctx.get_var('post_id'),
        'email': expect.string,
    }))


async def todo_shape(ctx):
    response = await ctx.get('/todos/1')
    response.expect_status(200).expect_body({
        'completed': expect.boolean,
        'dueDate': expect.string,
    })


api = krepko(BASE_URL)

(
    api.flow('Type and exact matchers')
    .tags(['matchers', 'smoke'])
    .do('Typed wildcards', type_matchers)
    .do('Exact values', exact_values)
)

(
    api.flow('Array matchers')
    .tags(['matchers', 'arrays'])
    .do('Ordered prefix', first_elements)
    .do('array_of', every_element)
    .do('array_containing', some_elements)
)

(
    api.flow('Depth and variables')
    .tags(['matchers'])
    .do('Depth limit', top_level_only)
    .do('Variables between requests', comments_of_post)
)

(
    api.flow('Todos contract')
    .tags(['matchers', 'draft'])
    .is_draft('completed flag type not agreed yet')
    .do('Todo shape', todo_shape)
)
